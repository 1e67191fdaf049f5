"""lockledger.settlement — settlement-engine hooks and the Temporal settlement workflow.

The workflow, activities, converter and worker are imported from their
modules directly.
"""

from lockledger.settlement.hooks import SettlementHooks as SettlementHooks
from lockledger.settlement.hooks import Trade as Trade
from lockledger.settlement.types import ClaimCheckInput as ClaimCheckInput
from lockledger.settlement.types import ClaimCheckOutput as ClaimCheckOutput
from lockledger.settlement.types import HookInput as HookInput
from lockledger.settlement.types import HookOutput as HookOutput
from lockledger.settlement.types import QuoteInput as QuoteInput
from lockledger.settlement.types import QuoteOutput as QuoteOutput
from lockledger.settlement.types import SettlementInput as SettlementInput
from lockledger.settlement.types import SettlementOutcome as SettlementOutcome
from lockledger.settlement.types import SettlementResult as SettlementResult
