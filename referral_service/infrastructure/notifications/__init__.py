from .email_enrollment_notifier import EmailEnrollmentNotifier, build_share_link

__all__ = ["EmailEnrollmentNotifier", "build_share_link"]
