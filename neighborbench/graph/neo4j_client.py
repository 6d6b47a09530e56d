"""
Neo4j Graph Store Module.

Synchronous Neo4j implementation of the graph store contract. The harness is
the sole client of the database, so a single session and a single open
transaction are used at any time.
"""

from collections.abc import Iterator

import structlog
from neo4j import Driver, GraphDatabase, Session, Transaction
from neo4j.exceptions import ClientError

from neighborbench.config.settings import Neo4jSettings, get_settings
from neighborbench.graph.schema import GraphNode, GraphRelationship, attribute_key
from neighborbench.graph.store import GraphStore, GraphTransaction, NodeNotFoundError

logger = structlog.get_logger(__name__)


def _quote(identifier: str) -> str:
    """Backtick-quote a label or property key for Cypher."""
    return "`" + identifier.replace("`", "``") + "`"


def resolve_store_path(store_path: str | None, settings: Neo4jSettings) -> tuple[str, str]:
    """
    Map the command-line store path onto a server URI and database name.

    A value containing ``://`` is a server URI using the configured database;
    any other value names the database on the configured server.
    """
    if not store_path:
        return settings.uri, settings.database
    if "://" in store_path:
        return store_path, settings.database
    return settings.uri, store_path


class Neo4jTransaction(GraphTransaction):
    """One explicit Neo4j transaction on a dedicated session."""

    NODE_BY_ID = """
    MATCH (n) WHERE id(n) = $node_id
    RETURN id(n) AS id, properties(n) AS properties
    """

    OUTGOING = """
    MATCH (n)-[r]->(m) WHERE id(n) = $node_id
    RETURN type(r) AS type, id(m) AS id, properties(m) AS properties
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._tx: Transaction = session.begin_transaction()
        self._closed = False

    def get_node(self, node_id: int) -> GraphNode:
        record = self._tx.run(self.NODE_BY_ID, {"node_id": node_id}).single()
        if record is None:
            raise NodeNotFoundError(node_id)
        return GraphNode(record["id"], record["properties"])

    def outgoing_relationships(self, node: GraphNode) -> Iterator[GraphRelationship]:
        result = self._tx.run(self.OUTGOING, {"node_id": node.id})
        for record in result:
            neighbor = GraphNode(record["id"], record["properties"])
            yield GraphRelationship(node, neighbor, record["type"])

    def find_nodes(self, label: str, key: str, value: str) -> Iterator[GraphNode]:
        # Label and key must be literal for the planner to pick the index
        query = (
            f"MATCH (n:{_quote(label)}) WHERE n.{_quote(key)} = $value "
            "RETURN id(n) AS id"
        )
        for record in self._tx.run(query, {"value": value}):
            yield GraphNode(record["id"])

    def commit(self) -> None:
        self._tx.commit()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._tx.close()
        finally:
            self._session.close()


class Neo4jGraphStore(GraphStore):
    """
    Neo4j-backed graph store.

    Provides transaction handles, index readiness and index creation for the
    ``name<k>`` attributes queried by the benchmark.
    """

    def __init__(self, store_path: str | None = None, settings: Neo4jSettings | None = None) -> None:
        self._settings = settings or get_settings().neo4j
        self.uri, self.database = resolve_store_path(store_path, self._settings)
        self._driver: Driver | None = None

    def open(self) -> None:
        """Connect to the server and create the database when the edition allows it."""
        if self._driver is not None:
            return

        self._driver = GraphDatabase.driver(
            self.uri,
            auth=(self._settings.username, self._settings.password.get_secret_value()),
            max_connection_pool_size=self._settings.max_connection_pool_size,
        )
        self._driver.verify_connectivity()
        self._create_database()
        logger.info("Connected to Neo4j", uri=self.uri, database=self.database)

    def _create_database(self) -> None:
        if self.database in ("neo4j", "system"):
            return
        assert self._driver is not None
        try:
            with self._driver.session(database="system") as session:
                session.run(f"CREATE DATABASE {_quote(self.database)} IF NOT EXISTS").consume()
        except ClientError as e:
            # Community edition only serves the default database
            logger.warning("Database creation skipped", database=self.database, error=str(e))

    def close(self) -> None:
        if self._driver is not None:
            logger.info("Shutting down database", database=self.database)
            self._driver.close()
            self._driver = None

    def _session(self) -> Session:
        if self._driver is None:
            self.open()
        assert self._driver is not None  # Type guard for mypy
        return self._driver.session(database=self.database)

    def begin_transaction(self) -> Neo4jTransaction:
        return Neo4jTransaction(self._session())

    def await_indexes(self, timeout_seconds: float | None = None) -> None:
        if timeout_seconds is None:
            timeout_seconds = self._settings.index_await_timeout_seconds
        with self._session() as session:
            session.run("CALL db.awaitIndexes($timeout)", {"timeout": int(timeout_seconds)}).consume()
        logger.info("Indexes online", timeout_seconds=timeout_seconds)

    def ensure_attribute_indexes(self, label: str, attribute_count: int) -> list[str]:
        """
        Create a range index per attribute property.

        Args:
            label: Node label the indexes are scoped to
            attribute_count: Number of ``name<k>`` properties, starting at 0

        Returns:
            Names of the indexes that were created or already existed
        """
        names: list[str] = []
        with self._session() as session:
            for index in range(attribute_count):
                key = attribute_key(index)
                name = f"{label.lower()}_{key}"
                query = (
                    f"CREATE INDEX {_quote(name)} IF NOT EXISTS "
                    f"FOR (n:{_quote(label)}) ON (n.{_quote(key)})"
                )
                try:
                    session.run(query).consume()
                except ClientError as e:
                    if "already exists" not in str(e).lower():
                        raise
                    logger.debug("Index exists", index=name)
                names.append(name)
        logger.info("Attribute indexes ensured", label=label, count=len(names))
        return names
