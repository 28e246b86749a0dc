"""
Infrastructure layer: MongoDB persistence (Motor) and the SMTP enrollment
notifier.
"""
