from .common import generate_client_name, utc_timestamp

__all__ = ["generate_client_name", "utc_timestamp"]
