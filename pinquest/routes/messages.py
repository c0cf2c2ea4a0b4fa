# pinquest/routes/messages.py
"""
Mensagens diretas entre usuários.

A conversa é identificada por conv_{menor_id}_{maior_id}; a lista de conversas é
montada a partir das mensagens mais recentes de cada uma.
"""
import logging

from flask import Blueprint, g
from flask_login import login_required, current_user
from sqlalchemy import or_

from pinquest import db
from pinquest.models import User, Message, build_conversation_id
from pinquest.models.message import MAX_MESSAGE_LENGTH
from pinquest.services.events import outbox
from pinquest.utils.errors import ValidationError, NotFoundError, AuthorizationError
from pinquest.utils.helpers import get_or_404, get_page_args, paginate, parse_int, parse_str
from pinquest.utils.responses import success

bp = Blueprint('messages', __name__, url_prefix='/api/v1/messages')
logger = logging.getLogger(__name__)

MESSAGE_FILTERS = ('all', 'sent', 'received')


def _involves_me():
    return or_(Message.sender_id == current_user.id, Message.recipient_id == current_user.id)


@bp.route('', methods=['POST'])
@login_required
def send_message():
    payload = g.payload
    recipient_id = parse_int(payload, 'recipientId')
    content = parse_str(payload, 'content')

    if recipient_id is None:
        raise ValidationError('recipientId is required')
    if not content:
        raise ValidationError('Message content is required')
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationError(f'Message cannot be longer than {MAX_MESSAGE_LENGTH} characters')
    if recipient_id == current_user.id:
        raise ValidationError('You cannot send a message to yourself')

    recipient = get_or_404(User, recipient_id, 'Recipient not found')
    message = Message(
        sender_id=current_user.id,
        recipient_id=recipient.id,
        conversation_id=build_conversation_id(current_user.id, recipient.id),
        content=content,
    )
    db.session.add(message)
    db.session.commit()

    data = message.to_dict()
    outbox.to_user(recipient.id, 'newMessage', data)
    outbox.notify(recipient.id, current_user.id, 'message', sender=current_user.name)
    return success(data, 201)


@bp.route('', methods=['GET'])
@login_required
def list_messages():
    message_type = g.params.get('type') or 'all'
    if message_type not in MESSAGE_FILTERS:
        raise ValidationError(f"type must be one of: {', '.join(MESSAGE_FILTERS)}")

    if message_type == 'sent':
        query = Message.query.filter_by(sender_id=current_user.id)
    elif message_type == 'received':
        query = Message.query.filter_by(recipient_id=current_user.id)
    else:
        query = Message.query.filter(_involves_me())
    query = query.order_by(Message.date.desc(), Message.id.desc())

    page, limit = get_page_args(g.params)
    messages, pagination = paginate(query, page, limit)
    return success({'messages': [m.to_dict() for m in messages], 'pagination': pagination})


@bp.route('/conversations', methods=['GET'])
@login_required
def list_conversations():
    """Uma entrada por conversa: última mensagem, outro participante e não lidas"""
    messages = Message.query.filter(_involves_me()) \
        .order_by(Message.date.desc(), Message.id.desc()).all()

    conversations = {}
    for message in messages:
        entry = conversations.get(message.conversation_id)
        if entry is None:
            other = message.recipient if message.sender_id == current_user.id else message.sender
            entry = conversations[message.conversation_id] = {
                'conversationId': message.conversation_id,
                'otherUser': other.to_public_dict() if other else None,
                'lastMessage': message.to_dict(),
                'unreadCount': 0,
            }
        if message.recipient_id == current_user.id and not message.read:
            entry['unreadCount'] += 1

    return success(list(conversations.values()))


@bp.route('/conversation/<int:user_id>', methods=['GET'])
@login_required
def get_conversation(user_id):
    other = get_or_404(User, user_id, 'User not found')
    conversation_id = build_conversation_id(current_user.id, other.id)
    query = Message.query.filter_by(conversation_id=conversation_id) \
        .order_by(Message.date.asc(), Message.id.asc())

    page, limit = get_page_args(g.params)
    messages, pagination = paginate(query, page, limit)

    # Abrir a conversa marca como lidas as recebidas
    for message in messages:
        if message.recipient_id == current_user.id:
            message.mark_read()
    db.session.commit()

    return success({
        'conversationId': conversation_id,
        'otherUser': other.to_public_dict(),
        'messages': [m.to_dict() for m in messages],
        'pagination': pagination,
    })


@bp.route('/<int:message_id>/read', methods=['PUT'])
@login_required
def mark_read(message_id):
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFoundError('Message not found')
    if message.recipient_id != current_user.id:
        raise AuthorizationError('Not authorized to update this message')
    message.mark_read()
    db.session.commit()
    return success(message.to_dict())


@bp.route('/<int:message_id>', methods=['DELETE'])
@login_required
def delete_message(message_id):
    message = db.session.get(Message, message_id)
    if message is None:
        raise NotFoundError('Message not found')
    if message.sender_id != current_user.id:
        raise AuthorizationError('Not authorized to delete this message')
    db.session.delete(message)
    db.session.commit()
    return success(None, message='Message deleted')
