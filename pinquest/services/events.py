"""
Fila de eventos de saída.

Os handlers HTTP publicam eventos de notificação e de broadcast depois do commit
principal; workers separados consomem a fila. Com EVENTS_ASYNC desligado (testes)
o despacho acontece na hora, no mesmo contexto.
"""
import logging
import queue
import threading
from collections import namedtuple

logger = logging.getLogger(__name__)

NotificationEvent = namedtuple(
    'NotificationEvent',
    ['recipient_id', 'sender_id', 'type', 'post_id', 'comment_id', 'data'],
    defaults=(None, None, None),
)
BroadcastEvent = namedtuple('BroadcastEvent', ['scope', 'target', 'event', 'data'])

_STOP = object()


def handle_notification(event):
    from pinquest.services.notification_service import NotificationService
    NotificationService.create(
        event.recipient_id,
        event.sender_id,
        event.type,
        post_id=event.post_id,
        comment_id=event.comment_id,
        **(event.data or {})
    )


def handle_broadcast(event):
    from pinquest.services.broadcaster import broadcaster
    if event.scope == 'user':
        broadcaster.to_user(event.target, event.event, event.data)
    elif event.scope == 'post':
        broadcaster.to_post(event.target, event.event, event.data)
    elif event.scope == 'global':
        broadcaster.to_global(event.event, event.data)
    else:
        raise ValueError(f'Unknown broadcast scope: {event.scope}')


class EventOutbox:
    """Fila de saída com um worker por tipo de evento"""

    def __init__(self):
        self.app = None
        self.async_mode = False
        self.queue = queue.Queue()
        self.workers = {
            NotificationEvent: handle_notification,
            BroadcastEvent: handle_broadcast,
        }
        self._thread = None

    def init_app(self, app):
        self.app = app
        self.async_mode = bool(app.config.get('EVENTS_ASYNC'))
        app.extensions['pinquest_outbox'] = self
        if self.async_mode:
            self.start()

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name='pinquest-outbox', daemon=True)
        self._thread.start()
        logger.info("📤 Worker de eventos iniciado")

    def stop(self):
        if self._thread is not None:
            self.queue.put(_STOP)
            self._thread.join(timeout=5)
            self._thread = None

    def _run(self):
        while True:
            event = self.queue.get()
            try:
                if event is _STOP:
                    return
                with self.app.app_context():
                    self.dispatch(event)
            finally:
                self.queue.task_done()

    def publish(self, event):
        if self.async_mode:
            self.queue.put(event)
        else:
            self.dispatch(event)

    def dispatch(self, event):
        """Entregar o evento ao worker; falhas não chegam ao request"""
        handler = self.workers.get(type(event))
        if handler is None:
            logger.error(f"Nenhum worker para evento {type(event).__name__}")
            return False
        try:
            handler(event)
            return True
        except Exception as e:
            logger.error(f"Erro ao processar {type(event).__name__}: {e}")
            return False

    # Atalhos usados pelos handlers

    def notify(self, recipient_id, sender_id, notification_type, post_id=None, comment_id=None, **data):
        self.publish(NotificationEvent(recipient_id, sender_id, notification_type,
                                       post_id, comment_id, data))

    def to_user(self, user_id, event, data):
        self.publish(BroadcastEvent('user', user_id, event, data))

    def to_post(self, post_id, event, data):
        self.publish(BroadcastEvent('post', post_id, event, data))

    def to_global(self, event, data):
        self.publish(BroadcastEvent('global', None, event, data))


outbox = EventOutbox()
