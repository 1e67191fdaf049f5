"""lockledger.oracle — quotes, spreaded-amount requests and the amount calculator."""

from lockledger.oracle.calculator import OracleAmountCalculator as OracleAmountCalculator
from lockledger.oracle.codec import DOUBLE_LENGTH as DOUBLE_LENGTH
from lockledger.oracle.codec import SINGLE_LENGTH as SINGLE_LENGTH
from lockledger.oracle.codec import decode_request as decode_request
from lockledger.oracle.codec import encode_request as encode_request
from lockledger.oracle.quote import OracleQuote as OracleQuote
from lockledger.oracle.quote import QuoteSource as QuoteSource
from lockledger.oracle.quote import check_quote as check_quote
from lockledger.oracle.request import DOUBLE_PRICE_FLAG as DOUBLE_PRICE_FLAG
from lockledger.oracle.request import INVERSE_FLAG as INVERSE_FLAG
from lockledger.oracle.request import DoubleQuoteRequest as DoubleQuoteRequest
from lockledger.oracle.request import SingleQuoteRequest as SingleQuoteRequest
from lockledger.oracle.request import SpreadedAmountRequest as SpreadedAmountRequest
