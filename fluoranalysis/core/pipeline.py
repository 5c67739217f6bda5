"""Base class for all analysis pipelines."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fluoranalysis.utils.logging import setup_logger


class Pipeline(ABC):
    """Base class for all analysis pipelines.

    This abstract base class provides common functionality for all pipeline
    components, including configuration loading, logging, and summary output.
    Pipelines operate on in-memory arrays; an output directory is optional
    and only used for the JSON summary and log file.
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        config_file: Optional[Union[str, Path]] = None,
        log_level: int = logging.INFO
    ):
        """Initialize the pipeline.

        Args:
            output_dir: Optional path to output directory
            config_file: Optional path to JSON configuration file
            log_level: Logging level
        """
        self.output_dir = Path(output_dir) if output_dir else None
        self.config_file = Path(config_file) if config_file else None

        log_file = None
        if self.output_dir:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.output_dir / f"{self.__class__.__name__}.log"

        # Set up logger
        self.logger = setup_logger(
            self.__class__.__name__,
            level=log_level,
            log_file=log_file
        )

        # Load configuration if provided
        self.config: Dict[str, Any] = {}
        if self.config_file:
            self.load_config()

    def load_config(self) -> None:
        """Load configuration from file.

        Raises:
            FileNotFoundError: If config file does not exist
            json.JSONDecodeError: If config file is not valid JSON
        """
        if not self.config_file:
            return

        self.logger.info(f"Loading configuration from {self.config_file}")

        try:
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)

            self.logger.debug(f"Loaded configuration: {self.config}")
        except FileNotFoundError:
            self.logger.error(f"Configuration file not found: {self.config_file}")
            raise
        except json.JSONDecodeError:
            self.logger.error(f"Invalid configuration file: {self.config_file}")
            raise

    @abstractmethod
    def validate_inputs(self) -> None:
        """Validate pipeline inputs.

        Raises:
            ValueError: If inputs are invalid
        """

    @abstractmethod
    def run(self) -> Dict[str, Any]:
        """Run the pipeline.

        This method must be implemented by subclasses.
        """

    def save_output(self, data: Dict[str, Any], file_name: str) -> Path:
        """Save pipeline output to a file.

        Args:
            data: JSON serialisable data to save
            file_name: Name of the output file

        Returns:
            Path to the saved file

        Raises:
            ValueError: If no output directory is set or the format is unsupported
        """
        if self.output_dir is None:
            raise ValueError("No output directory set for this pipeline")

        output_path = self.output_dir / file_name
        extension = output_path.suffix.lower()

        if extension == '.json':
            with open(output_path, 'w') as f:
                json.dump(data, f, indent=2)
        else:
            self.logger.warning(f"Unsupported output format: {extension}")
            raise ValueError(f"Unsupported output format: {extension}")

        self.logger.info(f"Saved output to {output_path}")

        return output_path
