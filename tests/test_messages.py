# tests/test_messages.py
"""
Testes de mensagens diretas
"""
import pytest

from pinquest.models import Message, build_conversation_id
from tests.conftest import make_user


class TestConversationId:
    """Testes do id de conversa"""

    def test_order_independent(self):
        assert build_conversation_id(7, 3) == build_conversation_id(3, 7) == 'conv_3_7'

    def test_numeric_order(self):
        assert build_conversation_id(10, 9) == 'conv_9_10'


def send(client, sender, recipient, auth_headers, content='Hello!'):
    return client.post('/api/v1/messages', json={'recipientId': recipient.id, 'content': content},
                       headers=auth_headers(sender))


class TestSendMessage:
    """Testes de POST /messages"""

    def test_send(self, client, user, other_user, auth_headers):
        resp = send(client, user, other_user, auth_headers)
        assert resp.status_code == 201
        data = resp.get_json()['data']
        assert data['conversationId'] == build_conversation_id(user.id, other_user.id)
        assert data['recipient']['id'] == other_user.id
        assert data['read'] is False

    def test_cannot_message_self(self, client, user, auth_headers):
        resp = send(client, user, user, auth_headers)
        assert resp.status_code == 400

    def test_unknown_recipient(self, client, user, auth_headers):
        resp = client.post('/api/v1/messages', json={'recipientId': 9999, 'content': 'hi'},
                           headers=auth_headers(user))
        assert resp.status_code == 404

    def test_content_too_long(self, client, user, other_user, auth_headers):
        resp = send(client, user, other_user, auth_headers, 'x' * 1001)
        assert resp.status_code == 400

    def test_empty_content(self, client, user, other_user, auth_headers):
        resp = send(client, user, other_user, auth_headers, '')
        assert resp.status_code == 400


class TestReadMessages:
    """Testes de listagem, conversas e leitura"""

    @pytest.fixture
    def chat(self, client, db, user, other_user, auth_headers):
        third = make_user(db, 'Third User', 'third@test.com')
        send(client, user, other_user, auth_headers, 'hi other')
        send(client, other_user, user, auth_headers, 'hi back')
        send(client, other_user, user, auth_headers, 'are you there?')
        send(client, third, user, auth_headers, 'hello from third')
        return third

    def test_type_filter(self, client, user, auth_headers, chat):
        sent = client.get('/api/v1/messages?type=sent', headers=auth_headers(user)).get_json()
        received = client.get('/api/v1/messages?type=received', headers=auth_headers(user)).get_json()
        everything = client.get('/api/v1/messages', headers=auth_headers(user)).get_json()
        assert len(sent['data']['messages']) == 1
        assert len(received['data']['messages']) == 3
        assert everything['data']['pagination']['total'] == 4

    def test_conversations(self, client, user, other_user, auth_headers, chat):
        resp = client.get('/api/v1/messages/conversations', headers=auth_headers(user))
        conversations = resp.get_json()['data']
        assert len(conversations) == 2
        by_other = {c['otherUser']['id']: c for c in conversations}
        assert by_other[other_user.id]['unreadCount'] == 2
        assert by_other[other_user.id]['lastMessage']['content'] == 'are you there?'
        assert by_other[chat.id]['unreadCount'] == 1

    def test_opening_conversation_marks_read(self, client, user, other_user, auth_headers, chat):
        resp = client.get(f'/api/v1/messages/conversation/{other_user.id}', headers=auth_headers(user))
        data = resp.get_json()['data']
        assert [m['content'] for m in data['messages']] == ['hi other', 'hi back', 'are you there?']
        assert Message.query.filter_by(recipient_id=user.id, read=False).count() == 1

    def test_only_recipient_marks_read(self, client, user, other_user, auth_headers, chat):
        message = Message.query.filter_by(sender_id=user.id).first()
        resp = client.put(f'/api/v1/messages/{message.id}/read', headers=auth_headers(user))
        assert resp.status_code == 401
        resp = client.put(f'/api/v1/messages/{message.id}/read', headers=auth_headers(other_user))
        assert resp.status_code == 200
        assert resp.get_json()['data']['readAt'] is not None

    def test_only_sender_deletes(self, client, user, other_user, auth_headers, chat):
        message = Message.query.filter_by(sender_id=user.id).first()
        assert client.delete(f'/api/v1/messages/{message.id}',
                             headers=auth_headers(other_user)).status_code == 401
        assert client.delete(f'/api/v1/messages/{message.id}',
                             headers=auth_headers(user)).status_code == 200
