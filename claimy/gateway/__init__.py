from claimy.gateway.gateway import Gateway, get_default_gateway

__all__ = ["Gateway", "get_default_gateway"]
