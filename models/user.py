"""
Модель пользователя
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

@dataclass
class User:
    """Модель пользователя (владельца напоминаний)"""
    id: int
    username: str
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Преобразует в словарь"""
        return {
            'id': self.id,
            'username': self.username,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'User':
        """Создает из словаря"""
        created_at = data.get('created_at')
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=data['id'],
            username=data['username'],
            is_active=data.get('is_active', True),
            created_at=created_at
        )
