# src/dough/engine.py
"""Engine bootstrap.

Engine.init configures logging, binds the engine's own configuration plus
whatever the host application declares, then reconfigures logging from the
bound values. Engine.shutdown persists the values the program changed.
"""

import sys
from pathlib import Path
from typing import Annotated, ClassVar, Literal

from dough.core.descriptors import ConfigFiles, ConfigValue
from dough.core.logging import configure_logging, get_logger
from dough.core.manager import DEFAULT_DIRECTORY, ConfigManager, get_manager
from dough.core.registry import ScanTarget

logger = get_logger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class EngineCore:
    log_level: ClassVar[
        Annotated[
            LogLevel,
            ConfigValue("LogLevel", ConfigFiles.ENGINE_CORE, "DEBUG, INFO, WARNING, ERROR or CRITICAL", default="INFO"),
        ]
    ] = "INFO"
    json_logs: ClassVar[
        Annotated[bool, ConfigValue("JsonLogs", ConfigFiles.ENGINE_CORE, "Write logs as JSON lines", default=False)]
    ] = False


class EngineVideo:
    title: ClassVar[Annotated[str, ConfigValue("Title", ConfigFiles.ENGINE_VIDEO, "Window title", default="Dough")]] = "Dough"
    window_size: ClassVar[
        Annotated[
            tuple[int, int],
            ConfigValue("WindowSize", ConfigFiles.ENGINE_VIDEO, "Width and height in pixels", default=(1280, 720)),
        ]
    ] = (1280, 720)
    fullscreen: ClassVar[
        Annotated[bool, ConfigValue("Fullscreen", ConfigFiles.ENGINE_VIDEO, "Start in fullscreen", default=False)]
    ] = False
    vsync: ClassVar[Annotated[bool, ConfigValue("VSync", ConfigFiles.ENGINE_VIDEO, "Sync to the display refresh rate")]] = True


class Engine:
    @staticmethod
    def init(
        config_dir: str | Path = DEFAULT_DIRECTORY,
        *targets: ScanTarget,
        manager: ConfigManager | None = None,
    ) -> ConfigManager:
        """Start the engine.

        Args:
            config_dir: Root config directory
            *targets: Host application modules/classes declaring config values
            manager: Defaults to the process-wide manager

        Returns:
            The manager holding the bound configuration.
        """
        configure_logging()
        manager = manager if manager is not None else get_manager()
        manager.init_config(config_dir, sys.modules[__name__], *targets)
        configure_logging(json_output=EngineCore.json_logs, level=EngineCore.log_level)
        logger.info("engine.started", config_dir=str(manager.directory))
        return manager

    @staticmethod
    def shutdown(manager: ConfigManager | None = None) -> None:
        manager = manager if manager is not None else get_manager()
        manager.refresh_config_values()
        logger.info("engine.stopped")
