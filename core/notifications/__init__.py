"""
Email notifications for procurement events.

    from core.notifications.services import NotificationService
    NotificationService.send_pr_created(pr)
"""
