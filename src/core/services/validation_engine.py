"""Motor de validación: resolución, checks de input y cadena de proveedores.

Este módulo concentra la orquestación que antes vivía repartida entre los
proveedores. Las capas de entrada (CLI, librería) delegan aquí, y los efectos
secundarios (red, logging) quedan detrás de interfaces inyectadas.

Reglas:
- `check()` nunca lanza: siempre devuelve un `ValidationResult`.
- Los proveedores se prueban uno a uno, nunca en paralelo: el fallback
  necesita ver cada desenlace antes de avanzar.
- Un fallo inesperado de un proveedor se convierte en PROVIDER_ERROR.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Sequence

from core.domain.models import GameDefinition, ProviderKey, StatusCode, ValidationResult
from core.domain.options import CheckOptions
from core.errors import HttpError, HttpScrapeError
from core.interfaces.provider import ValidationProvider
from core.interfaces.resolvers import PageResolver
from core.registry import GameRegistry
from core.support.backoff import backoff_sequence, retry_call
from core.support.rate_limiter import TokenBucket

_DEFAULT_ORDER = tuple(ProviderKey)


def _is_blank(value: str | int | None) -> bool:
    return value is None or str(value).strip() == ""


def merge_discovered(base: GameDefinition, discovered: GameDefinition) -> GameDefinition:
    """Campos de formulario de la página sobre la definición del catálogo."""

    if base.codashop is None or discovered.codashop is None:
        return base
    template = base.codashop.model_copy(
        update={
            "fixed": {**base.codashop.fixed, **discovered.codashop.fixed},
            "absolute_url": discovered.codashop.absolute_url or base.codashop.absolute_url,
        }
    )
    return base.model_copy(
        update={"codashop": template, "price_points": base.price_points or discovered.price_points}
    )


class ValidationEngine:
    """Orquesta un check completo contra la cadena de proveedores."""

    def __init__(
        self,
        registry: GameRegistry,
        providers: Iterable[ValidationProvider],
        *,
        preferred: ProviderKey | str | None = None,
        fallback: bool = True,
        logger: logging.Logger | None = None,
        discovery: PageResolver | None = None,
        rate_limiter: TokenBucket | None = None,
        retry_delays: Sequence[int] | None = None,
        cache_discovered: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._registry = registry
        self._providers: dict[ProviderKey, ValidationProvider] = {p.key: p for p in providers}
        self._preferred = ProviderKey.parse(preferred) if preferred is not None else None
        self._fallback = fallback
        self._logger = logger or logging.getLogger(__name__)
        self._discovery = discovery
        self._rate_limiter = rate_limiter
        self._retry_delays = tuple(backoff_sequence(2) if retry_delays is None else retry_delays)
        self._cache_discovered = cache_discovered
        self._sleep = sleep

    @property
    def registry(self) -> GameRegistry:
        return self._registry

    def provider_order(self) -> list[ValidationProvider]:
        """Preferido primero; el resto en el orden por defecto."""

        order: list[ProviderKey] = []
        if self._preferred is not None and self._preferred in self._providers:
            order.append(self._preferred)
        for key in _DEFAULT_ORDER:
            if key in self._providers and key not in order:
                order.append(key)
        return [self._providers[k] for k in order]

    # -- entrada pública --------------------------------------------------

    def check(
        self,
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None = None,
        *,
        product_path: str | None = None,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        return self._guarded(
            "check",
            lambda: self._check(game, user_id, zone_id, product_path, options),
            game,
            user_id,
            zone_id,
        )

    def check_with(
        self,
        provider_key: ProviderKey | str,
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None = None,
        *,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        """Igual que `check`, restringido a un único proveedor."""

        return self._guarded(
            "check_with",
            lambda: self._check_with(provider_key, game, user_id, zone_id, options),
            game,
            user_id,
            zone_id,
        )

    def check_path(
        self,
        product_path: str,
        user_id: str | int | None,
        zone_id: str | int | None = None,
        *,
        options: CheckOptions | None = None,
    ) -> ValidationResult:
        """Descubre la página de producto y valida con Codashop, sin pasar por el catálogo."""

        def run() -> ValidationResult:
            if _is_blank(user_id):
                return self._invalid(product_path, user_id, zone_id, "User ID is required.")
            if _is_blank(product_path):
                return self._invalid(product_path, user_id, zone_id, "Product path is required.")
            return self._check_discovered(product_path, product_path, user_id, zone_id, options)

        return self._guarded("check_path", run, product_path, user_id, zone_id)

    # -- pasos internos ---------------------------------------------------

    def _guarded(
        self,
        operation: str,
        run: Callable[[], ValidationResult],
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None,
    ) -> ValidationResult:
        try:
            return run()
        except Exception as exc:
            self._logger.error(
                "Unhandled failure during %s",
                operation,
                extra={"game": game, "error": str(exc)},
                exc_info=True,
            )
            return ValidationResult.make(
                status=False,
                code=StatusCode.EXCEPTION,
                message=str(exc) or exc.__class__.__name__,
                game=game,
                user_id=user_id,
                zone_id=zone_id,
            )

    def _check(
        self,
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None,
        product_path: str | None,
        options: CheckOptions | None,
    ) -> ValidationResult:
        if _is_blank(user_id):
            return self._invalid(game, user_id, zone_id, "User ID is required.")

        definition = self._lookup(game)
        if definition is None:
            if product_path:
                return self._check_discovered(game, product_path, user_id, zone_id, options)
            return self._unknown(game, user_id, zone_id)

        failure = self._zone_failure(definition, user_id, zone_id)
        if failure is not None:
            return failure

        last: ValidationResult | None = None
        for provider in self.provider_order():
            if not provider.supports(definition.code):
                continue
            last = self._attempt(provider, definition, user_id, zone_id, options)
            if last.status or not self._fallback:
                return last

        if last is None:
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message="No provider available for this game.",
                game=definition.code,
                user_id=user_id,
                zone_id=zone_id,
            )
        return last

    def _check_with(
        self,
        provider_key: ProviderKey | str,
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None,
        options: CheckOptions | None,
    ) -> ValidationResult:
        if _is_blank(user_id):
            return self._invalid(game, user_id, zone_id, "User ID is required.")

        definition = self._lookup(game)
        if definition is None:
            return self._unknown(game, user_id, zone_id)
        failure = self._zone_failure(definition, user_id, zone_id)
        if failure is not None:
            return failure

        code = definition.code
        try:
            key = ProviderKey.parse(provider_key)
        except ValueError:
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message=f"Unknown provider: {provider_key}",
                game=code,
                user_id=user_id,
                zone_id=zone_id,
            )

        provider = self._providers.get(key)
        if provider is None or not provider.supports(code):
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message=f"Provider {key.value} does not support {code}.",
                game=code,
                user_id=user_id,
                zone_id=zone_id,
                provider=key.value,
            )
        return self._attempt(provider, definition, user_id, zone_id, options)

    def _lookup(self, game: str) -> GameDefinition | None:
        code = self._registry.resolve_canonical(game)
        return self._registry.get(code) if code else None

    def _zone_failure(
        self,
        definition: GameDefinition,
        user_id: str | int | None,
        zone_id: str | int | None,
    ) -> ValidationResult | None:
        if definition.requires_zone and _is_blank(zone_id):
            code = definition.code
            return self._invalid(code, user_id, zone_id, f"Server/Zone is required for {code}.")
        return None

    def _attempt(
        self,
        provider: ValidationProvider,
        definition: GameDefinition,
        user_id: str | int | None,
        zone_id: str | int | None,
        options: CheckOptions | None,
    ) -> ValidationResult:
        code = definition.code
        if provider.key is ProviderKey.CODASHOP and definition.needs_discovery and self._discovery is not None:
            # El catálogo no trae los tokens de página: se piden en cada check.
            assert definition.product_path is not None
            return self._check_discovered(code, definition.product_path, user_id, zone_id, options, base=definition)

        try:
            return provider.validate(code, user_id, zone_id, options=options)  # type: ignore[arg-type]
        except Exception as exc:
            self._logger.warning(
                "Provider failed",
                extra={"provider": provider.key.value, "game": code, "error": str(exc)},
            )
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message=str(exc) or exc.__class__.__name__,
                game=code,
                user_id=user_id,
                zone_id=zone_id,
                provider=provider.key.value,
            )

    def _check_discovered(
        self,
        game: str,
        product_path: str,
        user_id: str | int | None,
        zone_id: str | int | None,
        options: CheckOptions | None = None,
        *,
        base: GameDefinition | None = None,
    ) -> ValidationResult:
        """Descubre la página y valida con Codashop.

        Con `base` (juego del catálogo) solo se toman de la página los campos
        del formulario; código, servidores y paths de respuesta siguen siendo
        los del catálogo.
        """

        codashop = self._providers.get(ProviderKey.CODASHOP)
        validate_definition = getattr(codashop, "validate_definition", None)
        if self._discovery is None or validate_definition is None:
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message="Discovery is not available.",
                game=game,
                user_id=user_id,
                zone_id=zone_id,
            )

        if self._rate_limiter is not None and not self._rate_limiter.take():
            self._logger.warning("Discovery rate limit reached", extra={"path": product_path})
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message="Discovery rate limit reached, try again later.",
                game=game,
                user_id=user_id,
                zone_id=zone_id,
                provider=ProviderKey.CODASHOP.value,
            )

        discovery = self._discovery
        try:
            discovered = retry_call(
                lambda: discovery.discover(product_path),
                self._retry_delays,
                retry_on=(HttpError, HttpScrapeError),
                sleep=self._sleep,
            )
        except Exception as exc:
            self._logger.warning(
                "Discovery failed",
                extra={"path": product_path, "error": str(exc)},
            )
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message=str(exc) or exc.__class__.__name__,
                game=game,
                user_id=user_id,
                zone_id=zone_id,
                provider=ProviderKey.CODASHOP.value,
            )

        self._logger.info(
            "Discovered game definition",
            extra={"path": product_path, "code": discovered.code},
        )
        if base is not None:
            definition = merge_discovered(base, discovered)
        else:
            definition = discovered
            if self._cache_discovered:
                self._registry.register(definition)

        try:
            return validate_definition(definition, user_id, zone_id, options)
        except Exception as exc:
            self._logger.warning(
                "Provider failed",
                extra={"provider": ProviderKey.CODASHOP.value, "game": definition.code, "error": str(exc)},
            )
            return ValidationResult.make(
                status=False,
                code=StatusCode.PROVIDER_ERROR,
                message=str(exc) or exc.__class__.__name__,
                game=definition.code,
                user_id=user_id,
                zone_id=zone_id,
                provider=ProviderKey.CODASHOP.value,
            )

    def _unknown(self, game: str, user_id: str | int | None, zone_id: str | int | None) -> ValidationResult:
        return ValidationResult.make(
            status=False,
            code=StatusCode.UNKNOWN_GAME,
            message=f"Unknown game: {game}",
            game=game,
            user_id=user_id,
            zone_id=zone_id,
        )

    @staticmethod
    def _invalid(
        game: str,
        user_id: str | int | None,
        zone_id: str | int | None,
        message: str,
    ) -> ValidationResult:
        return ValidationResult.make(
            status=False,
            code=StatusCode.INVALID_INPUT,
            message=message,
            game=game,
            user_id=user_id,
            zone_id=zone_id,
        )
