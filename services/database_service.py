"""
Сервис для работы с базой данных
"""
import asyncpg
from typing import Optional, List, Dict, Any
from contextlib import asynccontextmanager
from config.settings import settings
from utils import logger, DatabaseError

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        id BIGINT PRIMARY KEY,
        username VARCHAR(255) NOT NULL,
        is_active BOOLEAN DEFAULT TRUE,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS reminders (
        id SERIAL PRIMARY KEY,
        user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        title VARCHAR(200) NOT NULL,
        description VARCHAR(500),
        due_date TIMESTAMP NOT NULL,
        category VARCHAR(20) NOT NULL DEFAULT 'bill'
            CHECK (category IN ('bill', 'subscription', 'tax', 'investment', 'insurance', 'other')),
        amount NUMERIC(12, 2),
        is_recurring BOOLEAN NOT NULL DEFAULT FALSE,
        recurring_interval VARCHAR(10) NOT NULL DEFAULT 'monthly'
            CHECK (recurring_interval IN ('daily', 'weekly', 'monthly', 'yearly')),
        status VARCHAR(10) NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'completed', 'overdue')),
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        source_reminder_id INTEGER UNIQUE REFERENCES reminders(id) ON DELETE SET NULL
    );

    CREATE INDEX IF NOT EXISTS idx_reminders_user_status ON reminders (user_id, status);
    CREATE INDEX IF NOT EXISTS idx_reminders_user_due_date ON reminders (user_id, due_date);
"""

class DatabaseService:
    """Сервис для работы с базой данных"""

    def __init__(self):
        self.pool: Optional[asyncpg.Pool] = None

    async def initialize(self):
        """Инициализация пула соединений"""
        config = settings.database
        try:
            self.pool = await asyncpg.create_pool(
                host=config.host,
                port=int(config.port),
                database=config.name,
                user=config.user,
                password=config.password,
                min_size=config.min_pool_size,
                max_size=config.max_pool_size,
                command_timeout=config.command_timeout
            )
            logger.info("✅ Пул соединений с базой данных создан")
        except Exception as e:
            logger.error(f"❌ Ошибка создания пула соединений: {e}")
            raise DatabaseError(f"Не удалось подключиться к базе данных: {e}")

    async def init_schema(self):
        """Создание таблиц, если их еще нет"""
        await self.execute(SCHEMA)
        logger.info("✅ Схема базы данных проверена")

    async def close(self):
        """Закрытие пула соединений"""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Пул соединений закрыт")

    @asynccontextmanager
    async def get_connection(self):
        """Получение соединения из пула"""
        if not self.pool:
            raise DatabaseError("Пул соединений не инициализирован")

        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self):
        """Соединение внутри транзакции: коммит при выходе, откат при ошибке"""
        async with self.get_connection() as conn:
            async with conn.transaction():
                yield conn

    async def execute(self, query: str, *args) -> str:
        """Выполнение запроса без возврата результата"""
        async with self.get_connection() as conn:
            return await conn.execute(query, *args)

    async def fetch_one(self, query: str, *args) -> Optional[Dict[str, Any]]:
        """Получение одной записи"""
        async with self.get_connection() as conn:
            return await conn.fetchrow(query, *args)

    async def fetch_all(self, query: str, *args) -> List[Dict[str, Any]]:
        """Получение всех записей"""
        async with self.get_connection() as conn:
            return await conn.fetch(query, *args)

    async def fetch_val(self, query: str, *args) -> Any:
        """Получение одного значения"""
        async with self.get_connection() as conn:
            return await conn.fetchval(query, *args)

# Глобальный экземпляр сервиса
db_service = DatabaseService()
