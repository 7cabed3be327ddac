"""Training entrypoint for image_training.

Usage:
    python -m image_training.train                                  # baseline classifier
    python -m image_training.train --config-name train_twin         # twin network
    python -m image_training.train --config-name train_colorize     # grayscale -> colour
    python -m image_training.train trainer.epochs=3 data.batch_size=16
"""

import sys
from typing import Any

import hydra
import lightning as L
from loguru import logger
from omegaconf import DictConfig, OmegaConf

# CRITICAL: import models to trigger @register decorators BEFORE Hydra parses config
import image_training.models  # noqa: F401
from image_training.config import DataConfig, TrainerConfig
from image_training.data.builders import build_batches
from image_training.tasks import build_task
from image_training.training.loop import Trainer
from image_training.training.metrics import TrainingMetrics
from image_training.training.reporting import log_model_info


def _section(cfg: DictConfig, key: str) -> dict[str, Any]:
    node = cfg.get(key)
    if node is None:
        return {}
    return OmegaConf.to_container(node, resolve=True)  # type: ignore[return-value]


def run(cfg: DictConfig) -> TrainingMetrics:
    """Build data, model and trainer from a composed config and train."""
    L.seed_everything(cfg.get("seed", 42), workers=True)

    data_config = DataConfig(**_section(cfg, "data"))
    trainer_config = TrainerConfig(**_section(cfg, "trainer"))
    task = build_task(cfg.task, tolerance=trainer_config.tolerance)

    sources = build_batches(cfg.experiment, data_config, task.name)
    model = hydra.utils.instantiate(cfg.model)

    trainer = Trainer(model, task, cfg.checkpoint_name, config=trainer_config)
    log_model_info(trainer.module)

    _, metrics = trainer.fit(sources.train, sources.val)
    logger.info(f"Validation history: {metrics.as_dict()}")

    if sources.test is not None:
        test_acc, test_loss = trainer.evaluate(sources.test, desc="test")
        logger.info(f"Test: acc={test_acc:.4f} loss={test_loss:.4f}")
    return metrics


@hydra.main(version_base=None, config_path="conf", config_name="train_baseline")
def main(cfg: DictConfig) -> None:
    """Run training with the given Hydra config."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))
    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")
    run(cfg)


if __name__ == "__main__":
    main()
