"""
Сервис для работы с пользователями
"""
from typing import Optional
from datetime import datetime
from models.user import User
from services.database_service import db_service, DatabaseService
from utils import logger, DatabaseError

class UserService:
    """Сервис для работы с пользователями"""

    def __init__(self, db: DatabaseService = db_service):
        self.db = db

    async def create_user(self, user_id: int, username: str) -> User:
        """Создание пользователя (повторный вызов обновляет имя)"""
        try:
            query = """
                INSERT INTO users (id, username, is_active, created_at)
                VALUES ($1, $2, $3, $4)
                ON CONFLICT (id) DO UPDATE SET username = EXCLUDED.username
                RETURNING *
            """
            result = await self.db.fetch_one(query, user_id, username, True, datetime.now())
        except Exception as e:
            logger.error(f"Ошибка создания пользователя: {e}")
            raise DatabaseError(f"Не удалось создать пользователя: {e}")

        if not result:
            raise DatabaseError("Не удалось создать пользователя")

        logger.info(f"Создан пользователь: {username} (ID: {user_id})")
        return User.from_dict(dict(result))

    async def get_user(self, user_id: int) -> Optional[User]:
        """Получение пользователя по ID"""
        try:
            result = await self.db.fetch_one("SELECT * FROM users WHERE id = $1", user_id)
        except Exception as e:
            logger.error(f"Ошибка получения пользователя {user_id}: {e}")
            raise DatabaseError(f"Не удалось получить пользователя: {e}")

        return User.from_dict(dict(result)) if result else None

    async def is_user_exists(self, user_id: int) -> bool:
        """Проверка существования пользователя"""
        try:
            return bool(await self.db.fetch_val(
                "SELECT EXISTS(SELECT 1 FROM users WHERE id = $1)", user_id
            ))
        except Exception as e:
            logger.error(f"Ошибка проверки существования пользователя {user_id}: {e}")
            raise DatabaseError(f"Не удалось проверить пользователя: {e}")

# Глобальный экземпляр сервиса
user_service = UserService()
