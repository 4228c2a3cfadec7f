"""Presentation Exchange submission normalization and reselection

A wallet query answers a Presentation Exchange definition with a
presentation whose presentation_submission.descriptor_map points (by JSONPath)
into its verifiableCredential array. One input descriptor may be matched by
several credentials, each through its own descriptor map entry.

normalize() groups the matched credentials per input descriptor so a user can
pick one credential for each requirement; reselect() rewrites the
presentation to contain only the picked credentials.
"""

import copy
import uuid
from typing import Any, Mapping, Optional, Sequence

import jsonpath_ng as jsonpath
from pydantic import BaseModel, ConfigDict, Field
from returns.result import Failure, Result, Success

from wallet_oidc.domain.value_objects import QueryType

PRESENTATION_SUBMISSION = "presentation_submission"
VERIFIABLE_CREDENTIAL = "verifiableCredential"


class NormalizedGroup(BaseModel):
    """
    Credentials matched for one input descriptor.

    Attributes:
        id: Input descriptor ID (random for non Presentation Exchange results)
        name: Descriptor name from the query
        purpose: Descriptor purpose from the query
        format: Format declared by the first descriptor map entry
        credentials: Matched credentials in descriptor map order
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    purpose: Optional[str] = None
    format: Optional[str] = None
    credentials: list[Any] = Field(default_factory=list)


# ======================
# Error Types
# ======================


class PresentationExchangeError(Exception):
    """Base error for Presentation Exchange processing"""

    pass


class DefinitionNotFoundError(PresentationExchangeError):
    """Submission refers to a definition absent from the query"""

    def __init__(self, definition_id: Optional[str]):
        self.definition_id = definition_id
        super().__init__(f"presentation definition not found in query: {definition_id}")


class InputDescriptorNotFoundError(PresentationExchangeError):
    """Submission refers to an input descriptor absent from the definition"""

    def __init__(self, descriptor_id: Optional[str], definition_id: Optional[str]):
        self.descriptor_id = descriptor_id
        self.definition_id = definition_id
        super().__init__(f"input descriptor {descriptor_id} not found in definition {definition_id}")


class UnresolvedPathError(PresentationExchangeError):
    """Descriptor map path does not resolve to a credential"""

    def __init__(self, path: Optional[str], reason: str = "no match"):
        self.path = path
        super().__init__(f"descriptor map path {path!r} cannot be resolved: {reason}")


# ======================
# Operations
# ======================


def normalize(
    query: Sequence[Mapping[str, Any]], presentation: Mapping[str, Any]
) -> Result[list[NormalizedGroup], PresentationExchangeError]:
    """
    Group a query result's credentials by input descriptor.

    Results of non Presentation Exchange queries carry no submission; each of
    their credentials becomes its own group under a fresh random ID.

    Args:
        query: Credential queries the presentation answers
        presentation: Query result (verifiable presentation)

    Returns:
        Success(groups in descriptor map encounter order) or
        Failure(PresentationExchangeError)
    """
    submission = presentation.get(PRESENTATION_SUBMISSION)
    if not submission:
        return Success(
            [
                NormalizedGroup(id=str(uuid.uuid4()), credentials=[credential])
                for credential in _credentials(presentation)
            ]
        )

    definition_id = submission.get("definition_id")
    definition = find_definition(query, definition_id)
    if definition is None:
        return Failure(DefinitionNotFoundError(definition_id))

    descriptors = {d.get("id"): d for d in definition.get("input_descriptors") or []}
    groups: dict[str, dict[str, Any]] = {}

    for entry in submission.get("descriptor_map") or []:
        resolved = resolve_path(presentation, entry.get("path"))
        if isinstance(resolved, Failure):
            return resolved

        descriptor_id = entry.get("id")
        if descriptor_id in groups:
            groups[descriptor_id]["credentials"].extend(resolved.unwrap())
            continue

        descriptor = descriptors.get(descriptor_id)
        if descriptor is None:
            return Failure(InputDescriptorNotFoundError(descriptor_id, definition_id))

        groups[descriptor_id] = {
            "id": descriptor_id,
            "name": descriptor.get("name"),
            "purpose": descriptor.get("purpose"),
            "format": entry.get("format"),
            "credentials": list(resolved.unwrap()),
        }

    return Success([NormalizedGroup(**group) for group in groups.values()])


def reselect(
    presentation: Mapping[str, Any], selections: Optional[Mapping[str, str]] = None
) -> Result[dict[str, Any], PresentationExchangeError]:
    """
    Rebuild a presentation around one selected credential per descriptor.

    Descriptor map entries whose credential was not selected are dropped; kept
    entries are re-pointed at a compacted verifiableCredential array. The input
    presentation is left untouched.

    Args:
        presentation: Query result to rewrite
        selections: Input descriptor ID -> selected credential ID

    Returns:
        Success(new presentation) or Failure(PresentationExchangeError)
    """
    submission = presentation.get(PRESENTATION_SUBMISSION)
    if not submission:
        return Success(copy.deepcopy(dict(presentation)))

    selections = selections or {}
    kept_entries: list[dict[str, Any]] = []
    kept_credentials: list[Any] = []

    for entry in submission.get("descriptor_map") or []:
        descriptor_id = entry.get("id")
        selected = selections.get(descriptor_id)
        if selected is None or any(kept["id"] == descriptor_id for kept in kept_entries):
            continue

        resolved = resolve_path(presentation, entry.get("path"))
        if isinstance(resolved, Failure):
            return resolved

        credential = resolved.unwrap()[0]
        if _credential_id(credential) != selected:
            continue

        kept_entries.append({**entry, "path": f"$.{VERIFIABLE_CREDENTIAL}[{len(kept_credentials)}]"})
        kept_credentials.append(copy.deepcopy(credential))

    updated = copy.deepcopy(dict(presentation))
    updated[PRESENTATION_SUBMISSION]["descriptor_map"] = kept_entries
    updated[VERIFIABLE_CREDENTIAL] = kept_credentials
    return Success(updated)


# ======================
# Helpers
# ======================


def find_definition(
    query: Sequence[Mapping[str, Any]], definition_id: Optional[str]
) -> Optional[Mapping[str, Any]]:
    """Find a Presentation Exchange definition by ID within a credential query list"""
    for item in query:
        if item.get("type") != QueryType.PRESENTATION_EXCHANGE.value:
            continue
        for definition in item.get("credentialQuery") or []:
            if definition.get("id") == definition_id:
                return definition
    return None


def resolve_path(document: Any, path: Optional[str]) -> Result[list[Any], UnresolvedPathError]:
    """
    Evaluate a descriptor map JSONPath against a presentation.

    Returns:
        Success(non-empty list of matched values) or Failure(UnresolvedPathError)
    """
    if not path:
        return Failure(UnresolvedPathError(path, "path is empty"))
    try:
        expression = jsonpath.parse(path)
    except Exception as e:
        return Failure(UnresolvedPathError(path, f"invalid JSONPath: {e}"))

    matches = [match.value for match in expression.find(document)]
    if not matches:
        return Failure(UnresolvedPathError(path))
    return Success(matches)


def _credentials(presentation: Mapping[str, Any]) -> list[Any]:
    """verifiableCredential as a list; a single embedded credential is allowed"""
    credentials = presentation.get(VERIFIABLE_CREDENTIAL)
    if not credentials:
        return []
    if isinstance(credentials, Mapping):
        return [credentials]
    return list(credentials)


def _credential_id(credential: Any) -> Optional[str]:
    if isinstance(credential, Mapping):
        return credential.get("id")
    return None
