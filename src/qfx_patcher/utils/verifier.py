"""Re-reads patched output the way a downstream importer would."""

import io
import logging

from ofxparse import OfxParser
from ofxparse.ofxparse import OfxParserException

from .error_handler import FormatError


logger = logging.getLogger(__name__)


class OutputVerifier:
    """Checks that a patched export still parses with ofxparse"""

    def verify(self, text: str, source_name: str = '<memory>') -> int:
        """Parse ``text`` and return the number of statement transactions

        Raises:
            FormatError: If ofxparse cannot read the text
        """
        try:
            ofx = OfxParser.parse(io.BytesIO(text.encode('utf-8')))
        except (OfxParserException, ValueError) as e:
            raise FormatError(f"{source_name} does not parse as OFX: {e}", "VERIFY_FAILED") from e

        count = sum(
            len(account.statement.transactions)
            for account in ofx.accounts
            if account.statement is not None
        )
        logger.debug(f"Verified {source_name}: {len(ofx.accounts)} account(s), {count} transaction(s)")
        return count
