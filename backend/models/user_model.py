# backend/models/user_model.py

from werkzeug.security import check_password_hash, generate_password_hash

from models import db
from timeutils import isoformat, utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    # always stored trimmed and lowercased, so the unique index is case-insensitive
    email = db.Column(db.String(150), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)

    avatar = db.Column(db.String(500), nullable=True)
    avatar_path = db.Column(db.String(500), nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    address = db.Column(db.String(500), nullable=True)

    preferences = db.Column(db.JSON, nullable=False, default=dict)
    settings = db.Column(db.JSON, nullable=False, default=dict)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or "").strip().lower()

    @classmethod
    def find_by_email(cls, email: str):
        return cls.query.filter_by(email=cls.normalize_email(email)).first()

    def set_password(self, raw_password: str) -> None:
        self.password = generate_password_hash(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return check_password_hash(self.password, raw_password)

    def to_public_dict(self) -> dict:
        """Serialized profile; the password hash never leaves the model."""
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "avatar": self.avatar,
            "profilePicture": self.avatar,
            "phone": self.phone or "",
            "address": self.address or "",
            "preferences": self.preferences or {},
            "isActive": self.is_active,
            "lastLogin": isoformat(self.last_login),
            "joinDate": isoformat(self.created_at),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
