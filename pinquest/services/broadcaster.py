"""
Broadcast em tempo real para as salas do Socket.IO.

Salas: user_{id}, post_{id} e global. Entrega best-effort, sem persistência
e sem replay para quem conectar depois.
"""
import logging

from pinquest import socketio

logger = logging.getLogger(__name__)

GLOBAL_ROOM = 'global'


def user_room(user_id):
    return f'user_{user_id}'


def post_room(post_id):
    return f'post_{post_id}'


class Broadcaster:
    def __init__(self, server):
        self.server = server

    def emit(self, event, data, room=None):
        """Emitir evento; falhas são logadas e nunca propagadas"""
        try:
            if room:
                self.server.emit(event, data, to=room)
            else:
                self.server.emit(event, data)
            return True
        except Exception as e:
            logger.error(f"Erro ao emitir '{event}' para {room or 'todos'}: {e}")
            return False

    def to_user(self, user_id, event, data):
        return self.emit(event, data, room=user_room(user_id))

    def to_post(self, post_id, event, data):
        return self.emit(event, data, room=post_room(post_id))

    def to_global(self, event, data):
        return self.emit(event, data, room=GLOBAL_ROOM)


broadcaster = Broadcaster(socketio)
