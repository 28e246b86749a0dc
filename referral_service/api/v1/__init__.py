from .referral_controller import router as referral_router


__all__ = ["referral_router"]
