from sqlalchemy import false

from access_admin.extensions import db


class ApplicationUser(db.Model):
    __tablename__ = "application_users"

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(
        db.Integer, db.ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_admin = db.Column(db.Boolean, nullable=False, default=False, server_default=false())

    __table_args__ = (
        db.UniqueConstraint("application_id", "user_id", name="uq_application_user"),
    )

    application = db.relationship("Application", back_populates="memberships")
    user = db.relationship("User", back_populates="memberships")

    def to_member_dict(self):
        return {
            "id": self.user.id,
            "name": self.user.username,
            "email": self.user.email,
            "isAdmin": bool(self.is_admin),
        }
