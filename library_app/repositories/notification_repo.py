from library_app.extensions import db
from library_app.models.notification_log import NotificationLog


class NotificationRepo:
    @staticmethod
    def already_sent(fine_id: int, notif_type: str = "fine_notice") -> bool:
        return NotificationLog.query.filter_by(fine_id=fine_id, type=notif_type, success=True).first() is not None

    @staticmethod
    def log(entry: NotificationLog, commit: bool = False):
        db.session.add(entry)
        if commit:
            db.session.commit()
        return entry
