# User Model
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
import bcrypt
from datetime import datetime

db = SQLAlchemy()


def isoformat(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))
    location = db.Column(db.String(200))
    farm_size = db.Column(db.Float)  # in hectares
    crops = db.Column(db.JSON, default=list)
    role = db.Column(db.String(20), nullable=False, default='farmer', index=True)  # farmer, admin
    language_preference = db.Column(db.String(5), nullable=False, default='en')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @staticmethod
    def hash_password(password, rounds=12):
        """Hash a password using bcrypt"""
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')

    def set_password(self, password, rounds=12):
        self.password_hash = self.hash_password(password, rounds)

    def check_password(self, password):
        """Check if provided password matches hash using bcrypt"""
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    def is_farmer(self):
        return self.role == 'farmer'

    def is_admin(self):
        return self.role == 'admin'

    def profile(self):
        """Profile fields used by the scheme eligibility rules"""
        return {
            'farmSize': self.farm_size,
            'crops': self.crops or [],
            'location': self.location,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'phone': self.phone,
            'location': self.location,
            'farmSize': self.farm_size,
            'crops': self.crops or [],
            'role': self.role,
            'languagePreference': self.language_preference,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'
