from datetime import datetime

from pinquest import db

POST_STATUSES = ('pending', 'published', 'rejected')


class PostImage(db.Model):
    __tablename__ = 'post_images'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False, index=True)
    url = db.Column(db.String(500), nullable=False)
    public_id = db.Column(db.String(255))  # handle para remoção no provedor de imagens
    position = db.Column(db.Integer, default=0)

    def to_dict(self):
        return {'url': self.url, 'publicId': self.public_id}


class PostLike(db.Model):
    __tablename__ = 'post_likes'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Um like por usuário: garante a atomicidade do like no banco
    __table_args__ = (db.UniqueConstraint('post_id', 'user_id', name='uq_post_like'),)


class PostRating(db.Model):
    __tablename__ = 'post_ratings'

    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    value = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.UniqueConstraint('post_id', 'user_id', name='uq_post_rating'),)


class Post(db.Model):
    __tablename__ = 'posts'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(50), default='general')
    status = db.Column(db.String(20), default='published', nullable=False, index=True)

    # Coordenadas escalares (indexadas) - o ponto GeoJSON é derivado delas
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)

    posted_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    date_posted = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Agregados em cache
    likes_count = db.Column(db.Integer, default=0, nullable=False)
    average_rating = db.Column(db.Float, default=0.0)
    total_ratings = db.Column(db.Integer, default=0)

    # Relacionamentos
    author = db.relationship('User', back_populates='posts')
    images = db.relationship('PostImage', cascade='all, delete-orphan', order_by='PostImage.position')
    likes = db.relationship('PostLike', lazy='dynamic', cascade='all, delete-orphan')
    ratings = db.relationship('PostRating', lazy='dynamic', cascade='all, delete-orphan')
    comments = db.relationship('Comment', back_populates='post', lazy='dynamic',
                               cascade='all, delete-orphan', order_by='Comment.date.desc()')

    __table_args__ = (db.Index('ix_posts_lat_lng', 'latitude', 'longitude'),)

    @property
    def location(self):
        """Ponto GeoJSON ([longitude, latitude]) + coordenadas escalares"""
        return {
            'type': 'Point',
            'coordinates': [self.longitude, self.latitude],
            'latitude': self.latitude,
            'longitude': self.longitude,
        }

    def is_owned_by(self, user):
        return user is not None and getattr(user, 'id', None) == self.posted_by_id

    def is_liked_by(self, user_id):
        return self.likes.filter_by(user_id=user_id).first() is not None

    def set_images(self, images):
        self.images = [
            PostImage(url=image['url'], public_id=image.get('public_id'), position=index)
            for index, image in enumerate(images)
        ]

    def to_dict(self, include_author=True, include_comments=False):
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'status': self.status,
            'images': [image.to_dict() for image in self.images],
            'image': self.images[0].url if self.images else None,
            'location': self.location,
            'likesCount': self.likes_count or 0,
            'likes': [like.user_id for like in self.likes],
            'averageRating': round(self.average_rating or 0, 2),
            'totalRatings': self.total_ratings or 0,
            'commentsCount': self.comments.count(),
            'datePosted': self.date_posted.isoformat() if self.date_posted else None,
            'postedBy': self.posted_by_id,
        }
        if include_author and self.author is not None:
            data['postedBy'] = self.author.to_public_dict()
        if include_comments:
            data['comments'] = [
                comment.to_dict()
                for comment in self.comments.filter_by(parent_id=None)
            ]
        return data

    def __repr__(self):
        return f'<Post {self.title}>'
