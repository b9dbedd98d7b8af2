"""ValidateService — run the engine over a schema file and a data file.

Loads a TOML form schema and a JSON data record, builds a
:class:`FormEngine`, runs whole-form (or selected-field) validation, and
reports per-field state in a :class:`ServiceResult`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
import tomllib
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from wonderform.domain.rules import BUILTIN_RULE_NAMES, RULE_REGISTRY
from wonderform.domain.schema import FormSchema, load_form_schema
from wonderform.engine.aggregate import summarize
from wonderform.engine.form import FormEngine
from wonderform.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from wonderform.config.settings import WonderformSettings
    from wonderform.domain.types import ValidationResult
    from wonderform.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class ValidateService:
    """File-driven validation on top of :class:`FormEngine`."""

    def __init__(
        self,
        settings: WonderformSettings,
        plugin_manager: PluginManager | None = None,
    ) -> None:
        self._settings = settings
        self._plugins = plugin_manager

    def validate_files(
        self,
        schema_path: Path,
        data_path: Path,
        *,
        fields: list[str] | None = None,
    ) -> ServiceResult:
        """Validate the JSON object in *data_path* against *schema_path*.

        Args:
            schema_path: TOML form schema.
            data_path: JSON file holding one object of field values.
            fields: Validate only these fields; default is the whole form.
        """
        op = "validate"
        fail = partial(ServiceResult.failure, op)
        try:
            schema = load_form_schema(schema_path)
        except FileNotFoundError:
            return fail(ErrorCode.SCHEMA_NOT_FOUND, f"Schema not found: {schema_path}")
        except tomllib.TOMLDecodeError as exc:
            return fail(ErrorCode.INVALID_SCHEMA, f"Invalid TOML in {schema_path}: {exc}")
        except ValidationError as exc:
            return fail(
                ErrorCode.INVALID_SCHEMA,
                f"Invalid form schema {schema_path}",
                errors=[e["msg"] for e in exc.errors()],
            )

        try:
            data = json.loads(data_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return fail(ErrorCode.DATA_NOT_FOUND, f"Data file not found: {data_path}")
        except json.JSONDecodeError as exc:
            return fail(ErrorCode.INVALID_DATA, f"Invalid JSON in {data_path}: {exc}")
        if not isinstance(data, dict):
            return fail(ErrorCode.INVALID_DATA, "Data file must contain a JSON object")

        try:
            engine = self.build_engine(schema, data)
        except KeyError as exc:
            return fail(ErrorCode.UNKNOWN_RULE, str(exc.args[0]) if exc.args else str(exc))
        except (TypeError, ValueError) as exc:
            return fail(ErrorCode.INVALID_RULE, str(exc))

        unknown = [name for name in fields or [] if name not in engine.fields]
        if unknown:
            return fail(
                ErrorCode.UNKNOWN_FIELD,
                f"Unknown field(s): {', '.join(unknown)}",
                known=engine.fields,
            )

        started = time.perf_counter()
        result = asyncio.run(self._run(engine, fields))
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.debug(
            "Validated %s in %.2fms (valid=%s)", schema.form.name, elapsed_ms, result.valid
        )

        payload = {
            "form": engine.name,
            "valid": result.valid,
            "errors": result.errors,
            "fields": {name: state.to_dict() for name, state in engine.field_states().items()},
        }
        meta = {"duration_ms": elapsed_ms}
        if result.valid:
            return ServiceResult.success(op, payload, meta=meta)
        return fail(
            ErrorCode.VALIDATION_FAILED,
            f"{result.field}: {result.message}",
            data=payload,
            meta=meta,
            field=result.field,
            violation=result.violation,
        )

    def build_engine(self, schema: FormSchema, data: dict[str, Any]) -> FormEngine:
        """Compile *schema* and bind it to *data*."""
        options = self._settings.form.to_options(**schema.option_overrides())
        return FormEngine(
            data,
            schema.build_definitions(),
            options=options,
            name=schema.form.name,
            plugin_manager=self._plugins,
        )

    def list_rules(self) -> ServiceResult:
        """List every registered rule name, built-ins first."""
        items = [
            {"name": name, "builtin": name in BUILTIN_RULE_NAMES}
            for name in sorted(RULE_REGISTRY, key=lambda n: (n not in BUILTIN_RULE_NAMES, n))
        ]
        return ServiceResult.success("rules", {"items": items, "count": len(items)})

    @staticmethod
    async def _run(engine: FormEngine, fields: list[str] | None) -> ValidationResult:
        if not fields:
            return await engine.validate()
        await asyncio.gather(*(engine.validate_field(name) for name in fields))
        states = engine.field_states()
        return summarize({name: state for name, state in states.items() if name in fields})
