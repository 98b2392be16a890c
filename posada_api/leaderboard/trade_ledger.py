"""
Trade ledger: persisted trade reports and customer profiles.
"""

import logging
import time
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from ..persistence import JsonStore
from .models import Trade, UserProfile

logger = logging.getLogger(__name__)


class InvalidTradeReport(ValueError):
    """A trade report is missing required fields or has malformed values."""


class TradeLedger:
    """Records trades of opted-in customers and keeps the newest ones."""

    TRADES_KEY = "trades"
    USERS_KEY = "users"

    def __init__(self, store: JsonStore, max_trades: int = 500, username_max_length: int = 20,
                 clock=time.time):
        self._store = store
        self.max_trades = max_trades
        self.username_max_length = username_max_length
        self._clock = clock

    def load_trades(self) -> List[Trade]:
        raw = self._store.load(self.TRADES_KEY, default=[])
        if not isinstance(raw, list):
            return []
        trades = []
        for item in raw:
            try:
                trades.append(Trade.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed stored trade: {e}")
        return trades

    def load_users(self) -> Dict[str, UserProfile]:
        raw = self._store.load(self.USERS_KEY, default={})
        if not isinstance(raw, dict):
            return {}
        users = {}
        for cid, item in raw.items():
            try:
                users[cid] = UserProfile.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping malformed profile {cid}: {e}")
        return users

    def _save_users(self, users: Mapping[str, UserProfile]) -> bool:
        return self._store.save(self.USERS_KEY, {cid: u.model_dump() for cid, u in users.items()})

    def _save_trades(self, trades: List[Trade]) -> bool:
        return self._store.save(self.TRADES_KEY, [t.model_dump() for t in trades])

    def update_profile(self, cid: str, report: Mapping[str, Any]) -> UserProfile:
        """
        Apply username and opt-in changes carried by a report.

        Profiles are only created or touched when the report has a username
        or a truthy opt_in.
        """
        with self._store.lock(self.USERS_KEY):
            users = self.load_users()
            username = report.get('username')
            opt_in = report.get('opt_in')

            if username or opt_in:
                profile = users.get(cid) or UserProfile(joined=int(self._clock()))
                if username:
                    profile.username = str(username)[:self.username_max_length]
                if opt_in is not None:
                    profile.opt_in = bool(opt_in)
                users[cid] = profile
                if not self._save_users(users):
                    logger.error(f"Profile update for {cid} was not saved")

            return users.get(cid) or UserProfile(joined=0)

    def record(self, report: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Handle a trade report from a bot.

        Args:
            report: Decoded JSON body; needs customer_id and event

        Returns:
            Result payload telling whether the trade was recorded

        Raises:
            InvalidTradeReport: When required fields are missing or malformed
        """
        if not isinstance(report, Mapping) or not report.get('customer_id') or not report.get('event'):
            raise InvalidTradeReport('missing customer_id or event')

        cid = str(report['customer_id'])
        fields = {
            'cid': cid,
            'event': report['event'],
            'symbol': report.get('symbol'),
            'strategy': report.get('strategy'),
            'cost': report.get('cost'),
            'pnl': report.get('pnl'),
            'reason': report.get('reason'),
            'ts': report.get('ts') if report.get('ts') is not None else int(self._clock()),
        }
        try:
            trade = Trade.model_validate(fields)
        except ValidationError as e:
            raise InvalidTradeReport(f"invalid trade report: {e.error_count()} invalid field(s)")

        profile = self.update_profile(cid, report)
        if not profile.opt_in:
            return {'ok': True, 'recorded': False, 'reason': 'not opted in'}

        with self._store.lock(self.TRADES_KEY):
            trades = self.load_trades()
            trades.append(trade)
            if len(trades) > self.max_trades:
                trades = trades[-self.max_trades:]
            saved = self._save_trades(trades)

        if not saved:
            logger.error(f"Trade from {cid} was not saved")
            return {'ok': False, 'recorded': False, 'reason': 'storage unavailable'}

        logger.info(f"Recorded {trade.event} trade from {cid} ({trade.symbol or 'no symbol'})")
        return {'ok': True, 'recorded': True}
