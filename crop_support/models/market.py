# Mandi Price Models
from crop_support.models.user import db, isoformat
from crop_support.errors import ValidationError
from datetime import datetime, date


class MandiPrice(db.Model):
    __tablename__ = 'mandi_prices'

    id = db.Column(db.Integer, primary_key=True)
    crop = db.Column(db.String(100), nullable=False, index=True)
    variety = db.Column(db.String(100))
    market = db.Column(db.String(200), nullable=False)
    state = db.Column(db.String(100), nullable=False)
    district = db.Column(db.String(100))
    min_price = db.Column(db.Float, nullable=False)
    max_price = db.Column(db.Float, nullable=False)
    modal_price = db.Column(db.Float, nullable=False)
    price_date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    unit = db.Column(db.String(50), nullable=False, default='per quintal')
    source = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def validate(self):
        if None in (self.min_price, self.modal_price, self.max_price):
            raise ValidationError('Min, max and modal prices are required')
        for price in (self.min_price, self.modal_price, self.max_price):
            if isinstance(price, bool) or not isinstance(price, (int, float)):
                raise ValidationError(f'Price {price!r} is not a number')
        if not self.min_price <= self.modal_price <= self.max_price:
            raise ValidationError(
                f'Modal price {self.modal_price} must lie between min {self.min_price} and max {self.max_price}'
            )
        try:
            date.fromisoformat(self.price_date)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid price date: {self.price_date!r}')

    def to_dict(self):
        return {
            'id': self.id,
            'crop': self.crop,
            'variety': self.variety,
            'market': self.market,
            'state': self.state,
            'district': self.district,
            'minPrice': self.min_price,
            'maxPrice': self.max_price,
            'modalPrice': self.modal_price,
            'priceDate': self.price_date,
            'unit': self.unit,
            'source': self.source,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f'<MandiPrice {self.id} - {self.crop} @ {self.market}>'
