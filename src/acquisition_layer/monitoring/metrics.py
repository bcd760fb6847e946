"""Custom Prometheus metrics for the Content Acquisition Layer.

These metrics are exposed at the /metrics endpoint. Alert rules should be
configured for:
- circuit_transitions_total (to_phase="open" means a provider is being shed)
- provider_fetch_total (rising failure share per provider)
- repair_attempts_total (outcome="exhausted" means the model drifts off-schema)
"""

from prometheus_client import Counter, Histogram

# === Provider Chain Metrics ===

provider_fetch_total = Counter(
    "provider_fetch_total",
    "Transcript provider attempts by provider and outcome",
    ["provider", "outcome"],
)
"""
Provider attempts counter.

Labels:
- provider: Provider name (e.g., youtubetotranscript)
- outcome: success, failure, circuit_open

Alert thresholds:
- WARN: failure share > 20% for a provider over 15 minutes
- CRITICAL: every configured provider reporting failure or circuit_open
"""

circuit_transitions_total = Counter(
    "circuit_transitions_total",
    "Circuit breaker phase transitions by provider",
    ["provider", "from_phase", "to_phase"],
)
"""
Circuit phase transition counter.

Labels:
- provider: Provider name
- from_phase / to_phase: closed, open, half_open
"""

transcript_cache_lookups_total = Counter(
    "transcript_cache_lookups_total",
    "Response cache lookups by result",
    ["result"],
)
"""
Cache lookup counter.

Labels:
- result: hit, miss, stale (entry present but older than the TTL)
"""

# === Retry Metrics ===

retries_total = Counter(
    "retries_total",
    "Retry attempts scheduled after a retryable failure",
    ["operation", "error_type"],
)
"""
Retries scheduled by the RetryExecutor.

Labels:
- operation: Logical operation name (provider name, llm_generate, llm_repair)
- error_type: Exception class name that triggered the retry
"""

# === Structured Output Repair Metrics ===

repair_attempts_total = Counter(
    "repair_attempts_total",
    "Validation outcomes inside the repair loop",
    ["outcome"],
)
"""
Repair loop outcomes.

Labels:
- outcome: valid_first_pass, repaired, invalid, exhausted
"""

# === LLM Performance Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "LLM generation latency in seconds",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)

# === Validation Metrics ===

validation_failures_total = Counter(
    "validation_failures_total",
    "Structural validation failures by stage and error type",
    ["stage", "error_type"],
)
"""
Validation failures per stage.

Labels:
- stage: stage1 (JSON parse), stage2 (JSON Schema), model (pydantic model)
- error_type: empty_content, json_decode_error, not_json_object, schema_violation
"""
