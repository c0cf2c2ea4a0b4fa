from datetime import datetime

from pinquest import db

MAX_RECENT_LOCATIONS = 20


class SavedLocation(db.Model):
    """Lugar salvo pelo usuário (post ou resultado do mapa)"""
    __tablename__ = 'saved_locations'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    location_id = db.Column(db.String(100), nullable=False)  # id do post ou place_id do geocoder
    name = db.Column(db.String(200), nullable=False)
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    address = db.Column(db.String(500), default='')
    place_id = db.Column(db.String(100))
    type = db.Column(db.String(30), default='location')
    category = db.Column(db.String(50), default='general')
    description = db.Column(db.Text)
    saved_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('user_id', 'location_id', name='uq_saved_location'),)

    def to_dict(self):
        return {
            'id': self.location_id,
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'address': self.address or '',
            'placeId': self.place_id or self.location_id,
            'type': self.type,
            'category': self.category,
            'description': self.description or self.name,
            'savedAt': self.saved_at.isoformat() if self.saved_at else None,
        }

    def __repr__(self):
        return f'<SavedLocation {self.location_id} de {self.user_id}>'


class RecentLocation(db.Model):
    """Lugar visto recentemente; cada usuário guarda no máximo MAX_RECENT_LOCATIONS"""
    __tablename__ = 'recent_locations'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    location_id = db.Column(db.String(100), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, default='')
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)
    type = db.Column(db.String(30), default='location')
    viewed_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (db.UniqueConstraint('user_id', 'location_id', name='uq_recent_location'),)

    def to_dict(self):
        return {
            'id': self.location_id,
            'title': self.title,
            'description': self.description or '',
            'position': {'latitude': self.latitude, 'longitude': self.longitude},
            'type': self.type,
            'viewedAt': self.viewed_at.isoformat() if self.viewed_at else None,
        }
