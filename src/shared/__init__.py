"""
Общий код между сервисами.

Модули:
- events: конверт и схемы событий RabbitMQ
- models: DTO ответов доменных сервисов и модели API
"""

__all__: list[str] = []
