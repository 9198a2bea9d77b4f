#!/usr/bin/env python3
"""
Скрипт для создания администратора каталога в базе данных.

Использование:
    python scripts/create_admin.py --username admin --email admin@kitchenpro.ro --password secret
"""

import argparse
import sys
from pathlib import Path

# Добавляем путь к пакету storefront
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import or_, select

from storefront.core.auth import AuthService
from storefront.db.database import SessionLocal
from storefront.db.models import User


def create_admin(username: str, email: str, password: str) -> bool:
    """Создает администратора или обновляет пароль существующего."""
    print("🔑 Создание администратора...")

    try:
        with SessionLocal() as db:
            existing_admin = db.scalar(
                select(User).where(or_(User.username == username, User.email == email))
            )

            if existing_admin:
                existing_admin.hashed_password = AuthService.get_password_hash(password)
                existing_admin.is_admin = True
                existing_admin.is_active = True
                db.commit()
                print(f"✅ Администратор {existing_admin.username} уже существует, пароль обновлен")
                return True

            admin_user = User(
                username=username,
                email=email,
                hashed_password=AuthService.get_password_hash(password),
                full_name="Администратор каталога",
                is_active=True,
                is_admin=True,
                is_super_admin=True,
            )
            db.add(admin_user)
            db.commit()
            db.refresh(admin_user)

            print("✅ Администратор создан успешно!")
            print(f"   Username: {admin_user.username}")
            print(f"   Email: {admin_user.email}")
            print(f"   ID: {admin_user.id}")
            return True

    except Exception as e:
        print(f"❌ Ошибка создания администратора: {e}")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Создание администратора каталога")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", default="admin@kitchenpro.ro")
    parser.add_argument("--password", required=True)
    args = parser.parse_args()

    if not create_admin(args.username, args.email, args.password):
        sys.exit(1)
