"""
Cliente de Consultas (query builder)

Contrato genérico de lectura por tabla que usa la capa del dashboard:
select de columnas, joins embebidos, filtros (igualdad, ILIKE, pertenencia),
orden, límite/rango y conteo exacto. Cada ejecución devuelve un
QueryResult con datos O con error, nunca ambos; el cliente no lanza
excepciones por fallas del backend.

Uso:
    result = await (
        client.table("invoices")
        .select("id, amount, date")
        .embed("customers", "name", "email")
        .ilike("customers.name", contains_pattern("lee"))
        .order("date", desc=True)
        .range(0, 5)
    )
    if result.error:
        ...
"""

import time
from dataclasses import dataclass, replace
from typing import (
    Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional,
    Protocol, Sequence, Tuple, runtime_checkable
)

from sqlalchemy import MetaData, Table, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.utils.logger import get_logger, log_performance

logger = get_logger(__name__)

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """
    Construye un patrón ILIKE de subcadena ("%texto%").

    Los comodines LIKE que escriba el usuario (% y _) se escapan para que
    coincidan literalmente.
    """
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


# ============================================================================
# RESULTADOS
# ============================================================================

@dataclass(frozen=True)
class QueryError:
    """Error devuelto por el backend como valor."""
    message: str
    code: Optional[str] = None
    details: Optional[str] = None

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


@dataclass(frozen=True)
class QueryResult:
    """
    Resultado de una consulta.

    data es una lista de filas (dict), una sola fila/None con
    maybe_single(), o None en conteos head. count solo se llena si se
    pidió count="exact" y refleja el total sin rango ni límite.
    """
    data: Any = None
    count: Optional[int] = None
    error: Optional[QueryError] = None

    def __post_init__(self):
        if self.error is not None and (self.data is not None or self.count is not None):
            raise ValueError("Un QueryResult no puede traer datos y error a la vez")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(
        cls,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None
    ) -> "QueryResult":
        return cls(error=QueryError(message=message, code=code, details=details))


# ============================================================================
# ESPECIFICACIÓN DE CONSULTA
# ============================================================================

@dataclass(frozen=True)
class Filter:
    """Predicado de filtro. op: eq | ilike | in | or_ilike"""
    op: str
    column: Any
    value: Any


@dataclass(frozen=True)
class Embed:
    """Relación muchos-a-uno embebida en cada fila bajo la clave relation."""
    relation: str
    columns: Tuple[str, ...]


@dataclass(frozen=True)
class QuerySpec:
    """Descripción inmutable de una consulta, independiente del backend."""
    table: str
    columns: Tuple[str, ...] = ("*",)
    embeds: Tuple[Embed, ...] = ()
    filters: Tuple[Filter, ...] = ()
    order_by: Tuple[Tuple[str, bool], ...] = ()  # (columna, descendente)
    limit: Optional[int] = None
    offset: Optional[int] = None
    count: Optional[str] = None
    head: bool = False
    single: bool = False


Executor = Callable[[QuerySpec], Awaitable[QueryResult]]


def _split_columns(columns: Iterable[str]) -> Tuple[str, ...]:
    names: List[str] = []
    for column in columns:
        names.extend(part.strip() for part in column.split(",") if part.strip())
    return tuple(names) or ("*",)


class TableQuery:
    """
    Builder encadenable para una tabla.

    Cada método registra una parte de la consulta en el QuerySpec y
    retorna el mismo builder. La consulta se ejecuta con
    `await query.execute()` o directamente `await query`.
    """

    def __init__(self, table: str, executor: Executor):
        self._spec = QuerySpec(table=table)
        self._executor = executor

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    def _with(self, **changes: Any) -> "TableQuery":
        self._spec = replace(self._spec, **changes)
        return self

    def _add_filter(self, op: str, column: Any, value: Any) -> "TableQuery":
        return self._with(filters=self._spec.filters + (Filter(op, column, value),))

    def select(
        self,
        *columns: str,
        count: Optional[str] = None,
        head: bool = False
    ) -> "TableQuery":
        if count not in (None, "exact"):
            raise ValueError(f"Modo de conteo no soportado: {count}")
        return self._with(columns=_split_columns(columns), count=count, head=head)

    def embed(self, relation: str, *columns: str) -> "TableQuery":
        embed = Embed(relation=relation, columns=_split_columns(columns))
        return self._with(embeds=self._spec.embeds + (embed,))

    def eq(self, column: str, value: Any) -> "TableQuery":
        return self._add_filter("eq", column, value)

    def ilike(self, column: str, pattern: str) -> "TableQuery":
        return self._add_filter("ilike", column, pattern)

    def or_ilike(self, columns: Sequence[str], pattern: str) -> "TableQuery":
        return self._add_filter("or_ilike", tuple(columns), pattern)

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        return self._add_filter("in", column, tuple(values))

    def order(self, column: str, desc: bool = False) -> "TableQuery":
        return self._with(order_by=self._spec.order_by + ((column, desc),))

    def limit(self, count: int) -> "TableQuery":
        if count < 0:
            raise ValueError("El límite no puede ser negativo")
        return self._with(limit=count)

    def range(self, start: int, end: int) -> "TableQuery":
        """Restringe a las filas start..end (ambas inclusive, base 0)."""
        if start < 0 or end < start:
            raise ValueError(f"Rango inválido: {start}..{end}")
        return self._with(offset=start, limit=end - start + 1)

    def maybe_single(self) -> "TableQuery":
        """Devuelve una fila o None; más de una fila es un error."""
        return self._with(single=True)

    async def execute(self) -> QueryResult:
        return await self._executor(self._spec)

    def __await__(self):
        return self.execute().__await__()


@runtime_checkable
class QueryClientProtocol(Protocol):
    """
    Capacidad de lectura inyectada en cada función del dashboard.

    Cualquier objeto con table(name) -> TableQuery es compatible:
    el cliente SQLAlchemy, un cliente REST o un fake de tests.
    """

    def table(self, name: str) -> TableQuery:
        ...


# ============================================================================
# IMPLEMENTACIÓN SQLALCHEMY
# ============================================================================

class QueryBuildError(Exception):
    """La especificación referencia tablas, columnas o relaciones inexistentes."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


@dataclass
class _CompiledQuery:
    rows_stmt: Any
    count_stmt: Any
    base_columns: Tuple[str, ...]
    embedded: Dict[str, Tuple[str, ...]]

    def shape(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        record = {name: row[name] for name in self.base_columns}
        for relation, names in self.embedded.items():
            values = {name: row[f"{relation}.{name}"] for name in names}
            # LEFT JOIN sin coincidencia: todas las columnas llegan en NULL
            if any(value is not None for value in values.values()):
                record[relation] = values
            else:
                record[relation] = None
        return record


class SQLAlchemyQueryClient:
    """
    Cliente de consultas sobre un AsyncEngine de SQLAlchemy.

    Las tablas se resuelven desde los metadatos declarativos; las
    relaciones embebidas siguen las foreign keys de la tabla base.
    """

    def __init__(self, engine: AsyncEngine, metadata: Optional[MetaData] = None):
        if metadata is None:
            from src.database.connection import Base
            from src.database import models  # noqa
            metadata = Base.metadata

        self.engine = engine
        self.metadata = metadata

    def table(self, name: str) -> TableQuery:
        return TableQuery(name, self._execute)

    async def _execute(self, spec: QuerySpec) -> QueryResult:
        try:
            compiled = self._compile(spec)
        except QueryBuildError as e:
            return QueryResult.failure(str(e), code=e.code)
        except SQLAlchemyError as e:
            return QueryResult.failure(
                f"Consulta inválida sobre '{spec.table}'",
                code=type(e).__name__,
                details=str(e)
            )

        start = time.perf_counter()
        data: Optional[List[Dict[str, Any]]] = None
        count: Optional[int] = None

        try:
            async with self.engine.connect() as conn:
                if spec.count == "exact":
                    count = (await conn.execute(compiled.count_stmt)).scalar_one()
                if not spec.head:
                    rows = (await conn.execute(compiled.rows_stmt)).mappings().all()
                    data = [compiled.shape(row) for row in rows]
        except SQLAlchemyError as e:
            cause = getattr(e, "orig", None) or e
            return QueryResult.failure(
                f"Consulta sobre '{spec.table}' falló",
                code=type(e).__name__,
                details=str(cause)
            )
        finally:
            log_performance(
                logger,
                f"select {spec.table}",
                (time.perf_counter() - start) * 1000
            )

        if spec.single and data is not None:
            if len(data) > 1:
                return QueryResult.failure(
                    "La consulta devolvió más de una fila",
                    code="multiple_rows"
                )
            return QueryResult(data=data[0] if data else None, count=count)

        return QueryResult(data=data, count=count)

    # ------------------------------------------------------------------------
    # Compilación QuerySpec -> SQL
    # ------------------------------------------------------------------------

    def _table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise QueryBuildError(f"La tabla '{name}' no existe", code="undefined_table")
        return table

    def _relation(self, base: Table, relation: str) -> Tuple[Any, Any]:
        """Resuelve una relación muchos-a-uno por nombre de tabla o de columna FK."""
        candidates = []
        if relation in base.c:
            candidates = [fk for fk in base.c[relation].foreign_keys]
        else:
            target = self.metadata.tables.get(relation)
            if target is not None:
                candidates = [fk for fk in base.foreign_keys if fk.column.table is target]

        if not candidates:
            raise QueryBuildError(
                f"No hay relación entre '{base.name}' y '{relation}'",
                code="undefined_relation"
            )

        fk = candidates[0]
        alias = fk.column.table.alias(relation)
        return alias, fk.parent == alias.c[fk.column.name]

    @staticmethod
    def _columns(table: Any, names: Tuple[str, ...]) -> List[Any]:
        if "*" in names:
            return list(table.c)
        columns = []
        for name in names:
            if name not in table.c:
                raise QueryBuildError(
                    f"La columna '{name}' no existe en '{table.name}'",
                    code="undefined_column"
                )
            columns.append(table.c[name])
        return columns

    def _compile(self, spec: QuerySpec) -> _CompiledQuery:
        base = self._table(spec.table)
        sources: Dict[Optional[str], Any] = {None: base}

        # Relaciones filtradas se unen con INNER JOIN
        filtered = set()
        for flt in spec.filters:
            refs = flt.column if flt.op == "or_ilike" else (flt.column,)
            for ref in refs:
                if "." in ref:
                    filtered.add(ref.split(".", 1)[0])

        selected = []
        base_columns = self._columns(base, spec.columns)
        for column in base_columns:
            selected.append(column.label(column.name))

        from_clause = base
        embedded: Dict[str, Tuple[str, ...]] = {}
        for embed in spec.embeds:
            alias, onclause = self._relation(base, embed.relation)
            from_clause = from_clause.join(
                alias, onclause, isouter=embed.relation not in filtered
            )
            sources[embed.relation] = alias
            columns = self._columns(alias, embed.columns)
            embedded[embed.relation] = tuple(column.name for column in columns)
            for column in columns:
                selected.append(column.label(f"{embed.relation}.{column.name}"))

        def resolve(ref: str) -> Any:
            relation, _, name = ref.rpartition(".")
            source = sources.get(relation or None)
            if source is None:
                raise QueryBuildError(
                    f"La relación '{relation}' no está embebida en la consulta",
                    code="undefined_relation"
                )
            return self._columns(source, (name,))[0]

        conditions = []
        for flt in spec.filters:
            if flt.op == "eq":
                conditions.append(resolve(flt.column) == flt.value)
            elif flt.op == "ilike":
                conditions.append(resolve(flt.column).ilike(flt.value, escape=LIKE_ESCAPE))
            elif flt.op == "in":
                conditions.append(resolve(flt.column).in_(list(flt.value)))
            elif flt.op == "or_ilike":
                conditions.append(or_(*[
                    resolve(ref).ilike(flt.value, escape=LIKE_ESCAPE) for ref in flt.column
                ]))
            else:
                raise QueryBuildError(f"Operador no soportado: {flt.op}", code="undefined_operator")

        rows_stmt = select(*selected).select_from(from_clause).where(*conditions)
        for ref, desc in spec.order_by:
            column = resolve(ref)
            rows_stmt = rows_stmt.order_by(column.desc() if desc else column.asc())

        limit = spec.limit
        if spec.single and limit is None:
            limit = 2  # suficiente para detectar más de una fila
        if limit is not None:
            rows_stmt = rows_stmt.limit(limit)
        if spec.offset:
            rows_stmt = rows_stmt.offset(spec.offset)

        count_stmt = select(func.count()).select_from(from_clause).where(*conditions)

        return _CompiledQuery(
            rows_stmt=rows_stmt,
            count_stmt=count_stmt,
            base_columns=tuple(column.name for column in base_columns),
            embedded=embedded,
        )
