# pinquest/routes/sockets.py
"""
Handlers do Socket.IO: entrada e saída das salas.

A sala user_{id} só aceita a conexão autenticada como aquele usuário (token em
auth.token no connect). Salas de post e global são abertas.
"""
import logging

from flask import request
from flask_socketio import join_room, leave_room, emit

from pinquest import socketio
from pinquest.services.broadcaster import GLOBAL_ROOM, user_room, post_room
from pinquest.utils.auth import get_authenticator

logger = logging.getLogger(__name__)

# sid -> user_id das conexões autenticadas
connected_users = {}


def _extract_id(payload, key):
    """Aceita o id puro ou um dict {key: id}"""
    if isinstance(payload, dict):
        payload = payload.get(key)
    try:
        return int(payload)
    except (TypeError, ValueError):
        return None


@socketio.on('connect')
def handle_connect(auth=None):
    token = auth.get('token') if isinstance(auth, dict) else None
    if token:
        user = get_authenticator().authenticate(token)
        if user is not None and not user.is_banned:
            connected_users[request.sid] = user.id
            logger.info(f"Socket {request.sid} conectado como usuário {user.id}")
            return
        logger.info(f"Socket {request.sid} com token inválido, seguindo anônimo")
    logger.debug(f"Socket {request.sid} conectado")


@socketio.on('disconnect')
def handle_disconnect(*args):
    connected_users.pop(request.sid, None)
    logger.debug(f"Socket {request.sid} desconectado")


@socketio.on('join-user-room')
def handle_join_user_room(payload):
    user_id = _extract_id(payload, 'userId')
    if user_id is None or connected_users.get(request.sid) != user_id:
        emit('error', {'message': 'Not authorized to join this room'})
        return
    join_room(user_room(user_id))
    emit('joined', {'room': user_room(user_id)})


@socketio.on('join-post-room')
def handle_join_post_room(payload):
    post_id = _extract_id(payload, 'postId')
    if post_id is None:
        emit('error', {'message': 'Invalid post id'})
        return
    join_room(post_room(post_id))
    emit('joined', {'room': post_room(post_id)})


@socketio.on('leave-post-room')
def handle_leave_post_room(payload):
    post_id = _extract_id(payload, 'postId')
    if post_id is None:
        emit('error', {'message': 'Invalid post id'})
        return
    leave_room(post_room(post_id))
    emit('left', {'room': post_room(post_id)})


@socketio.on('join-global-room')
def handle_join_global_room(*args):
    join_room(GLOBAL_ROOM)
    emit('joined', {'room': GLOBAL_ROOM})
