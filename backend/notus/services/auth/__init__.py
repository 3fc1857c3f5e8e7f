from notus.services.auth.service import AuthService, SigninResult

__all__ = ["AuthService", "SigninResult"]
