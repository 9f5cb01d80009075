# Government Scheme Models
from crop_support.models.user import db, isoformat
from crop_support.errors import ValidationError
from datetime import datetime

SCHEME_STATUSES = ['Active', 'Inactive', 'Expired']
APPLICATION_STATUSES = ['draft', 'submitted', 'under_review', 'approved', 'rejected']


class GovernmentScheme(db.Model):
    __tablename__ = 'government_schemes'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    eligibility = db.Column(db.Text, nullable=False)
    benefits = db.Column(db.Text, nullable=False)
    application_process = db.Column(db.Text, nullable=False)
    deadline = db.Column(db.String(10))
    status = db.Column(db.String(10), nullable=False, default='Active')  # Active, Inactive, Expired
    category = db.Column(db.String(50), nullable=False)
    target_states = db.Column(db.JSON)
    official_url = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def validate(self):
        if self.status not in SCHEME_STATUSES:
            raise ValidationError(f'Unknown scheme status: {self.status}')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'eligibility': self.eligibility,
            'benefits': self.benefits,
            'applicationProcess': self.application_process,
            'deadline': self.deadline,
            'status': self.status,
            'category': self.category,
            'targetStates': self.target_states,
            'officialUrl': self.official_url,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<GovernmentScheme {self.id} - {self.title}>'


class SchemeApplication(db.Model):
    __tablename__ = 'scheme_applications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    scheme_id = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='draft')
    documents = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text)
    submitted_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def validate(self):
        if self.status not in APPLICATION_STATUSES:
            raise ValidationError(f'Unknown application status: {self.status}')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'schemeId': self.scheme_id,
            'status': self.status,
            'documents': self.documents or [],
            'notes': self.notes,
            'submittedAt': isoformat(self.submitted_at),
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<SchemeApplication {self.id} ({self.status})>'
