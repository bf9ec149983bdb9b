import sys

from iperf_site_metrics.cli import main

sys.exit(main())
