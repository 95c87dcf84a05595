"""
Reward Service

Rewards are created by the user and claimed once. Whether a claim spends
coins is a deployment decision (DEDUCT_COINS_ON_CLAIM); either way a
second claim is a no-op.
"""
import logging
from typing import List, Optional

from sprout.config import settings
from sprout.errors import ValidationError
from sprout.models.schemas import RewardRecord
from sprout.storage.base import RecordStore, RecordKind, utcnow

logger = logging.getLogger(__name__)


def create_reward(store: RecordStore, user_id: int, fields: dict) -> RewardRecord:
    return store.create(RecordKind.REWARD, {
        **fields,
        "user_id": user_id,
        "is_claimed": False,
        "claimed_at": None,
    })


def list_rewards(store: RecordStore, user_id: int) -> List[RewardRecord]:
    return store.list(RecordKind.REWARD, user_id=user_id)


def claim_reward(
    store: RecordStore,
    reward_id: int,
    deduct_coins: Optional[bool] = None,
) -> RewardRecord:
    """
    Claim a reward.

    Args:
        store: Record store.
        reward_id: Reward to claim.
        deduct_coins: Spend coin_cost from the owner's balance.
            Defaults to settings.DEDUCT_COINS_ON_CLAIM.

    Returns:
        The claimed reward. An already claimed reward comes back unchanged,
        claimed_at included.

    Raises:
        NotFoundError: Unknown reward (or owner, when deducting).
        ValidationError: Reward unavailable, or balance too low.
    """
    if deduct_coins is None:
        deduct_coins = settings.DEDUCT_COINS_ON_CLAIM

    with store.transaction():
        reward = store.get(RecordKind.REWARD, reward_id)

        if reward.is_claimed:
            logger.info(f"Reward {reward_id} already claimed at {reward.claimed_at}")
            return reward

        if not reward.is_available:
            raise ValidationError("Reward is not available", {"reward_id": reward_id})

        if deduct_coins:
            user = store.get(RecordKind.USER, reward.user_id)
            if user.coins < reward.coin_cost:
                raise ValidationError(
                    "Not enough coins to claim this reward",
                    {"coins": user.coins, "coin_cost": reward.coin_cost},
                )
            store.update(RecordKind.USER, user.id, {"coins": user.coins - reward.coin_cost})

        reward = store.update(RecordKind.REWARD, reward_id, {
            "is_claimed": True,
            "claimed_at": utcnow(),
        })

    logger.info(f"Reward {reward_id} '{reward.title}' claimed (coins deducted: {deduct_coins})")
    return reward
