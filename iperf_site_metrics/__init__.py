''' Inter-site iperf3 bandwidth metrics for Sensu clients. '''

__version__ = "0.1.0"
