"""Presentational helpers for a host UI."""
from __future__ import annotations

from typing import Optional

from .computer_use import is_deepseek_r1, is_deepseek_r1_free_openrouter, is_dolphin_model, is_qwen_model
from .types import ModelDescriptor

COMPUTER_CONTROL_LABEL = "Computer Control"

def computer_control_badge(descriptor: ModelDescriptor) -> Optional[str]:
    if not descriptor.capabilities.supports_computer_use:
        return None
    return COMPUTER_CONTROL_LABEL

def badge_style(model_id: str) -> str:
    if is_dolphin_model(model_id):
        return "dolphin"
    if is_qwen_model(model_id):
        return "qwen"
    if is_deepseek_r1_free_openrouter(model_id):
        return "deepseek-free"
    if is_deepseek_r1(model_id):
        return "deepseek"
    return "default"
