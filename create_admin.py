"""
Script para criar (ou promover) um administrador
Execute: python create_admin.py email@exemplo.com [senha]
"""
import sys

from pinquest import create_app, db
from pinquest.models import User


def create_admin(email, password=None):
    app = create_app()

    with app.app_context():
        admin = User.query.filter_by(email=email.lower()).first()

        if admin:
            print(f"⚠️  Usuário {email} já existe, promovendo para admin")
            admin.role = 'admin'
            if password:
                admin.set_password(password)
        else:
            if not password:
                print("❌ Informe a senha para criar um novo admin")
                return False
            admin = User(name=email.split('@')[0], email=email.lower(), role='admin',
                         is_verified=True)
            admin.set_password(password)
            db.session.add(admin)

        db.session.commit()
        print(f"✅ Admin pronto: {admin.email}")
        return True


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Uso: python create_admin.py email [senha]")
        sys.exit(1)
    ok = create_admin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None)
    sys.exit(0 if ok else 1)
