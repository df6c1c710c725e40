from portal.health.router import router


__all__ = ["router"]
