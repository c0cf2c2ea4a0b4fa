import logging
import os

from pinquest import create_app, db, socketio

app = create_app()

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO),
)
logger = logging.getLogger(__name__)


@app.shell_context_processor
def make_shell_context():
    # Importar models aqui para evitar importação circular
    from pinquest.models import User, Post, Comment, Notification, Message, Report

    return {'db': db, 'User': User, 'Post': Post, 'Comment': Comment,
            'Notification': Notification, 'Message': Message, 'Report': Report}


if __name__ == '__main__':
    with app.app_context():
        logger.info(f"Banco de dados: {app.config['SQLALCHEMY_DATABASE_URI']}")
        db.create_all()
        logger.info("Banco de dados criado/atualizado")

    port = int(os.environ.get('PORT', 5000))
    logger.info(f"PinQuest rodando em http://localhost:{port} (debug={app.config['DEBUG']})")
    socketio.run(app, host='0.0.0.0', port=port, debug=app.config['DEBUG'],
                 allow_unsafe_werkzeug=True)
