"""
Service container

Every long-lived handle the API needs (database, stores, provider
clients, orchestrator) is built once here and attached to the app. Tests
build their own container from fakes.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request

from vox_engine.api.auth import HeaderAuthProvider
from vox_engine.config import ConfigLoader, SystemConfig
from vox_engine.db import Database
from vox_engine.llm import BaseLLMClient, create_llm_client
from vox_engine.services import (
    CharacterStore,
    HistoryStore,
    IdentityResolver,
    PipelineOrchestrator,
    ResponseAssembler,
    SqlCharacterStore,
    SqlHistoryStore,
)
from vox_engine.speech import BaseASRClient, BaseTTSClient, create_asr_client, create_tts_client

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    config: SystemConfig
    character_store: CharacterStore
    history_store: HistoryStore
    llm_client: BaseLLMClient
    asr_client: Optional[BaseASRClient]
    tts_client: Optional[BaseTTSClient]
    orchestrator: PipelineOrchestrator
    identity_resolver: IdentityResolver
    auth_provider: HeaderAuthProvider
    assembler: ResponseAssembler = field(default_factory=ResponseAssembler)
    database: Optional[Database] = None

    @classmethod
    def from_components(
        cls,
        config: SystemConfig,
        character_store: CharacterStore,
        history_store: HistoryStore,
        llm_client: BaseLLMClient,
        asr_client: Optional[BaseASRClient] = None,
        tts_client: Optional[BaseTTSClient] = None,
        database: Optional[Database] = None,
    ) -> "ServiceContainer":
        """Wire the orchestrator and resolvers around already-built collaborators."""
        orchestrator = PipelineOrchestrator(
            character_store=character_store,
            history_store=history_store,
            llm_client=llm_client,
            asr_client=asr_client,
            tts_client=tts_client,
            config=config.pipeline,
        )
        return cls(
            config=config,
            character_store=character_store,
            history_store=history_store,
            llm_client=llm_client,
            asr_client=asr_client,
            tts_client=tts_client,
            orchestrator=orchestrator,
            identity_resolver=IdentityResolver(config.auth.require_authentication),
            auth_provider=HeaderAuthProvider(config.auth.user_header),
            database=database,
        )

    @classmethod
    def build(cls, config: SystemConfig, loader: Optional[ConfigLoader] = None) -> "ServiceContainer":
        """Create the database, sync persona seeds, and connect providers."""
        loader = loader or ConfigLoader()

        database = Database(config.database)
        database.init_db()
        logger.info("✓ Database initialized")

        character_store = SqlCharacterStore(database.SessionLocal)
        seeds = loader.load_all_characters(config.paths.characters)
        for seed in seeds.values():
            character_store.upsert(
                seed.id,
                seed.name,
                seed.system_prompt,
                description=seed.description,
                default_voice=seed.default_voice,
            )
        if seeds:
            logger.info(f"✓ Synced {len(seeds)} character seed(s)")
        else:
            logger.warning("No character seeds found - create characters through the API")

        llm_client = create_llm_client(config.llm)
        asr_client = create_asr_client(config.asr)
        tts_client = create_tts_client(config.tts)

        return cls.from_components(
            config=config,
            character_store=character_store,
            history_store=SqlHistoryStore(database.SessionLocal),
            llm_client=llm_client,
            asr_client=asr_client,
            tts_client=tts_client,
            database=database,
        )

    async def aclose(self) -> None:
        """Close provider clients and dispose of the engine."""
        for client in (self.llm_client, self.asr_client, self.tts_client):
            if client is not None:
                await client.close()
        if self.database is not None:
            self.database.dispose()


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the app's container."""
    services = request.app.state.services
    if services is None:
        raise RuntimeError("Services not initialized")
    return services
