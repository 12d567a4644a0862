from .api_client import NomadClient, SchedulerGateway

__all__ = ["NomadClient", "SchedulerGateway"]
