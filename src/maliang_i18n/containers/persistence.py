# src/maliang_i18n/containers/persistence.py
"""持久化容器：按配置选择记录存储实现。"""

from dependency_injector import containers, providers

from maliang_i18n.infrastructure.persistence import (
    InMemoryRecordStore,
    SqlAlchemyRecordStore,
)


class PersistenceContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    record_store = providers.Selector(
        config.record_store,
        memory=providers.Singleton(InMemoryRecordStore),
        sqlalchemy=providers.Singleton(
            SqlAlchemyRecordStore.from_url,
            url=config.database.url,
            echo=config.database.echo,
        ),
    )
