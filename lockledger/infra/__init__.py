"""lockledger.infra — Infrastructure protocols, adapters, and configuration."""

from lockledger.infra.config import QUOTE_TTL as QUOTE_TTL
from lockledger.infra.config import SPREAD_DENOMINATOR as SPREAD_DENOMINATOR
from lockledger.infra.config import TOPIC_CLAIMS as TOPIC_CLAIMS
from lockledger.infra.config import TOPIC_LOCKS as TOPIC_LOCKS
from lockledger.infra.config import LedgerConfig as LedgerConfig
from lockledger.infra.config import OracleConfig as OracleConfig
from lockledger.infra.config import Settings as Settings
from lockledger.infra.config import WorkerConfig as WorkerConfig
from lockledger.infra.memory_adapter import InMemoryCustody as InMemoryCustody
from lockledger.infra.memory_adapter import InMemoryEventBus as InMemoryEventBus
from lockledger.infra.memory_adapter import InMemoryLockStore as InMemoryLockStore
from lockledger.infra.memory_adapter import InMemoryQuoteSource as InMemoryQuoteSource
from lockledger.infra.protocols import Custody as Custody
from lockledger.infra.protocols import EventBus as EventBus
from lockledger.infra.protocols import LockStore as LockStore
