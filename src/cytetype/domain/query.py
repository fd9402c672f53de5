"""
Request payload schema.

Lets callers assemble the ``POST /annotate`` body from already prepared
data and validate it before a job is submitted.
"""

from typing import Optional, Dict, Any, List, Mapping, Sequence, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .exceptions import PayloadValidationError


LLM_PROVIDERS = ("google", "openai", "anthropic", "groq", "mistral", "openrouter", "bedrock")

AGENT_TYPES = ("contextualizer", "annotator", "reviewer", "summarizer", "clinician", "chat")


class LLMModelConfig(BaseModel):
    """Model selection for one or more server-side agents."""

    provider: str
    name: str = Field(min_length=1)
    apiKey: Optional[str] = None
    baseUrl: Optional[str] = None
    awsAccessKeyId: Optional[str] = None
    awsSecretAccessKey: Optional[str] = None
    awsDefaultRegion: Optional[str] = None
    modelSettings: Optional[Dict[str, Any]] = None
    targetAgents: List[str] = Field(default_factory=list)
    skipValidation: bool = False
    allowFallback: bool = False

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in LLM_PROVIDERS:
            raise ValueError(f"provider must be one of: {', '.join(LLM_PROVIDERS)}")
        return v

    @field_validator("targetAgents")
    @classmethod
    def validate_target_agents(cls, v: List[str]) -> List[str]:
        invalid = [a for a in v if a not in AGENT_TYPES]
        if invalid:
            raise ValueError(f"Invalid agent types: {', '.join(invalid)}")
        return v

    @model_validator(mode="after")
    def check_credentials(self) -> "LLMModelConfig":
        """Require an API key or a complete set of AWS credentials."""
        if self.apiKey is not None:
            return self

        aws_fields = (self.awsAccessKeyId, self.awsSecretAccessKey, self.awsDefaultRegion)
        provided = [f is not None for f in aws_fields]
        if any(provided):
            if not all(provided):
                raise ValueError("All AWS credentials must be provided if any of them are provided")
            return self

        raise ValueError("Either apiKey or all AWS credentials must be provided")


class InputData(BaseModel):
    """Prepared per-cluster data sent with a job."""

    studyInfo: str = ""
    infoTags: Dict[str, str] = Field(default_factory=dict)
    clusterLabels: Dict[str, str] = Field(default_factory=dict)
    clusterMetadata: Dict[str, Dict[str, Dict[str, float]]] = Field(default_factory=dict)
    markerGenes: Dict[str, List[str]] = Field(default_factory=dict)
    visualizationData: Optional[Dict[str, Any]] = None
    expressionData: Dict[str, Dict[str, float]] = Field(default_factory=dict)


def _coerce(model, value):
    if isinstance(value, model):
        return value
    return model.model_validate(value)


def build_query(
    input_data: Union[InputData, Mapping[str, Any]],
    llm_configs: Optional[Sequence[Union[LLMModelConfig, Mapping[str, Any]]]] = None,
    study_context: Optional[str] = None,
    metadata: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Build a validated ``/annotate`` request body.

    Args:
        input_data: Prepared data (model instance or plain mapping)
        llm_configs: Optional model configurations
        study_context: Overrides ``studyInfo`` when given
        metadata: Overrides ``infoTags`` when given

    Returns:
        Plain dict ready to be JSON-encoded

    Raises:
        PayloadValidationError: If any part fails validation
    """
    try:
        data = _coerce(InputData, input_data)
        updates: Dict[str, Any] = {}
        if study_context is not None:
            updates["studyInfo"] = study_context
        if metadata is not None:
            updates["infoTags"] = dict(metadata)
        if updates:
            data = InputData.model_validate({**data.model_dump(), **updates})

        configs = None
        if llm_configs:
            configs = [
                _coerce(LLMModelConfig, c).model_dump(exclude_none=True)
                for c in llm_configs
            ]
    except ValidationError as e:
        raise PayloadValidationError(f"Invalid request payload: {e}") from e

    return {
        "input_data": data.model_dump(),
        "llm_configs": configs,
    }
