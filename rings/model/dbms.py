"""Database engine families and basic connection descriptions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping, Union
from urllib.parse import quote


def _url_encode(text: str) -> str:
    return quote(text, safe="")


class Relational(enum.Enum):
    ORACLE = "oracle"
    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    SQLSERVER = "sqlserver"


class TimeSeries(enum.Enum):
    INFLUXDB = "influxdb"
    PROMETHEUS = "prometheus"
    GRAPHITE = "graphite"
    OPENTSDB = "opentsdb"


class Document(enum.Enum):
    MONGODB = "mongodb"
    COUCHDB = "couchdb"
    ELASTICSEARCH = "elasticsearch"
    RETHINKDB = "rethinkdb"


class KeyValue(enum.Enum):
    REDIS = "redis"
    MEMCACHED = "memcached"
    HBASE = "hbase"
    CASSANDRA = "cassandra"


class Graph(enum.Enum):
    NEO4J = "neo4j"
    DGRAPH = "dgraph"
    TITAN = "titan"
    ARANGODB = "arangodb"


class Column(enum.Enum):
    CLICKHOUSE = "clickhouse"
    DRUID = "druid"
    KUDU = "kudu"
    HIVE = "hive"


class Search(enum.Enum):
    ELASTICSEARCH = "elasticsearch"
    SOLR = "solr"
    LUCENE = "lucene"
    XAPIAN = "xapian"


class MultiModel(enum.Enum):
    MONGODB = "mongodb"
    NEO4J = "neo4j"
    REDIS = "redis"


Engine = Union[Relational, TimeSeries, Document, KeyValue, Graph, Column, Search, MultiModel]
_FAMILIES = (Relational, TimeSeries, Document, KeyValue, Graph, Column, Search, MultiModel)


@dataclass(frozen=True)
class DBMS:
    """A database engine within its family."""

    engine: Engine

    def __post_init__(self) -> None:
        if not isinstance(self.engine, _FAMILIES):
            raise TypeError(f"not a database engine: {self.engine!r}")

    @property
    def family(self) -> type:
        return type(self.engine)

    def protocol(self) -> str:
        """URL scheme used to connect to this engine."""
        return self.engine.value


@dataclass
class ConnectBasic:
    """Host, credentials and options of one database connection."""

    alias: str = ""
    host: str = ""
    port: int = 0
    name: str = ""
    user: str = ""
    password: str = ""
    charset: str | None = None
    options: dict[str, str] = field(default_factory=dict)

    def add_option(self, key: str, value: str) -> "ConnectBasic":
        self.options[key] = value
        return self

    def remove_option(self, key: str) -> "ConnectBasic":
        self.options.pop(key, None)
        return self

    def basic_connection_string(self, protocol: str, options: Mapping[str, str] | None = None) -> str:
        """URL with credentials, charset and options as query parameters."""
        text = (
            f"{protocol}://{self.host}:{self.port}/{self.name}?"
            f"user={_url_encode(self.user)}&password={_url_encode(self.password)}"
        )
        if self.charset is not None:
            text += f"&charset={_url_encode(self.charset)}"
        merged = dict(self.options)
        if options:
            merged.update(options)
        for key, value in merged.items():
            text += f"&{_url_encode(key)}={_url_encode(value)}"
        return text