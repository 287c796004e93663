from .invoker import HttpInvoker, IRemoteCallInvoker, measure_network_request

__all__ = ["HttpInvoker", "IRemoteCallInvoker", "measure_network_request"]
