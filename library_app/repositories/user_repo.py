from library_app.extensions import db
from library_app.models.user import User
from library_app.utils.constants import UPDATE_PENDING


class UserRepo:
    @staticmethod
    def get_by_username(username: str):
        return User.query.filter_by(username=username).first()

    @staticmethod
    def get_by_email(email: str):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(user_id: int):
        return db.session.get(User, user_id)

    @staticmethod
    def list_all():
        return User.query.order_by(User.created_at.desc(), User.id.desc()).all()

    @staticmethod
    def list_pending_updates():
        return User.query.filter_by(update_status=UPDATE_PENDING).order_by(User.update_requested_at.asc()).all()

    @staticmethod
    def create(user: User):
        db.session.add(user)
        db.session.commit()
        return user

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def delete(user: User):
        db.session.delete(user)
        db.session.commit()
