# agent/local_model.py
"""
Local causal LM behind agent/llm_service.py.

Weights load once per process (base model plus an optional LoRA adapter).
A missing or broken adapter falls back to the base model.
"""
from pathlib import Path
from typing import Tuple

import torch
from peft import PeftModel
from transformers import AutoModelForCausalLM, AutoTokenizer

from demandcast.config import (
    ADAPTER_PATH,
    BASE_MODEL,
    MAX_NEW_TOKENS,
    TEMPERATURE,
    TOKENIZER_PATH,
    TOP_P,
)

# Lazy globals so repeated requests reuse the loaded weights
_tokenizer = None
_model = None
_device = None


def _device_dtype() -> Tuple[str, torch.dtype]:
    use_cuda = torch.cuda.is_available()
    use_mps = getattr(torch.backends, "mps", None) and torch.backends.mps.is_available()
    device = "cuda" if use_cuda else ("mps" if use_mps else "cpu")
    dtype = torch.float16 if (use_cuda or use_mps) else torch.float32
    return device, dtype


def is_loaded() -> bool:
    return _model is not None


def load_once():
    global _tokenizer, _model, _device
    if _model is not None:
        return
    _device, dtype = _device_dtype()
    print(f"[llm] Loading base model: {BASE_MODEL} on {_device}")
    _tokenizer = AutoTokenizer.from_pretrained(TOKENIZER_PATH, use_fast=True)
    if _tokenizer.pad_token is None:
        _tokenizer.pad_token = _tokenizer.eos_token

    base = AutoModelForCausalLM.from_pretrained(BASE_MODEL, torch_dtype=dtype)
    model = base
    adapter = Path(ADAPTER_PATH)
    if adapter.exists() and (adapter / "adapter_config.json").exists():
        try:
            print(f"[llm] Applying LoRA adapter from {adapter}")
            model = PeftModel.from_pretrained(base, str(adapter))
        except (OSError, ValueError) as e:
            print(f"[llm] Failed to load LoRA adapter: {e}")
            print("[llm] Falling back to base model only.")
            model = base
    else:
        print("[llm] No adapter found; using base model only.")

    model.to(_device)
    model.eval()
    _model = model


def _chat_text(system: str, user: str) -> str:
    if getattr(_tokenizer, "chat_template", None):
        messages = [{"role": "system", "content": system}, {"role": "user", "content": user}]
        return _tokenizer.apply_chat_template(messages, tokenize=False, add_generation_prompt=True)
    return f"{system}\n\n{user}\n\n"


@torch.inference_mode()
def generate_text(system: str, user: str, max_new_tokens: int = MAX_NEW_TOKENS) -> str:
    load_once()
    enc = _tokenizer(_chat_text(system, user), return_tensors="pt").to(_device)
    out = _model.generate(
        **enc,
        max_new_tokens=max_new_tokens,
        temperature=TEMPERATURE,
        top_p=TOP_P,
        do_sample=TEMPERATURE > 0,
        pad_token_id=_tokenizer.pad_token_id,
    )
    # decode only the continuation, not the echoed prompt
    new_tokens = out[0][enc["input_ids"].shape[1]:]
    return _tokenizer.decode(new_tokens, skip_special_tokens=True).strip()
