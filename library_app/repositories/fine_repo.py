from library_app.extensions import db
from library_app.models.fine import Fine


class FineRepo:
    @staticmethod
    def get(fine_id: int):
        return db.session.get(Fine, fine_id)

    @staticmethod
    def get_by_borrow(borrow_id: int):
        return Fine.query.filter_by(borrow_id=borrow_id).first()

    @staticmethod
    def list_by_user(user_id: int):
        return Fine.query.filter_by(user_id=user_id).order_by(Fine.id.desc()).all()

    @staticmethod
    def list_all(status=None):
        q = Fine.query
        if status:
            q = q.filter(Fine.status == status)
        return q.order_by(Fine.updated_at.desc(), Fine.id.desc()).all()

    @staticmethod
    def add(fine: Fine):
        db.session.add(fine)
        return fine

    @staticmethod
    def commit():
        db.session.commit()

    @staticmethod
    def flush():
        db.session.flush()
