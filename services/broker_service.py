# services/broker_service.py
"""Broker registration and the referral (downline) tree."""
import logging
from typing import Dict, Optional, Set

from models import Broker, utcnow
from .errors import BrokerNotFound, InvalidRequest
from .stores import LedgerStores

logger = logging.getLogger(__name__)


def get_broker(stores: LedgerStores, broker_id: int) -> Broker:
     broker = stores.brokers.get(broker_id)
     if broker is None:
          raise BrokerNotFound(broker_id)
     return broker


def create_broker(
     stores: LedgerStores,
     full_name: str,
     email: Optional[str] = None,
     phone: Optional[str] = None,
     upline_id: Optional[int] = None
) -> Broker:
     """Register a broker, optionally under an existing upline."""
     if not full_name or not full_name.strip():
          raise InvalidRequest("Broker name is required")

     with stores.atomic():
          if upline_id is not None and stores.brokers.get(upline_id) is None:
               raise BrokerNotFound(upline_id)
          broker = stores.brokers.add(Broker(
               full_name=full_name.strip(),
               email=email.strip().lower() if email else None,
               phone=phone,
               upline_id=upline_id,
               created_at=utcnow()
          ))

     logger.info("Registered broker %s (%s) under upline %s", broker.id, broker.full_name, upline_id)
     return broker


def downline_tree(stores: LedgerStores, broker_id: int, max_depth: Optional[int] = None) -> Dict:
     """
     Nested referral tree rooted at broker_id.

     Each node: {"id", "full_name", "level", "children": [...]}; the root is
     level 0. A broker already placed in the tree is not expanded again.
     """
     root = get_broker(stores, broker_id)
     visited: Set[int] = set()

     def build(broker: Broker, level: int) -> Dict:
          visited.add(broker.id)
          node = {"id": broker.id, "full_name": broker.full_name, "level": level, "children": []}
          if max_depth is not None and level >= max_depth:
               return node
          for child in stores.brokers.children(broker.id):
               if child.id in visited:
                    logger.warning("Broker %s appears twice in the downline of %s; skipping", child.id, broker_id)
                    continue
               node["children"].append(build(child, level + 1))
          return node

     return build(root, 0)
