"""Capability interfaces the plugin host depends on, and related types."""

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Event kinds the host can dispatch to a plugin.

    Member names are the bare identifiers used in ``@subscriptions(...)``;
    values are the names the host uses on the wire.
    """

    PlayerJoin = "PLAYER_JOIN"
    PlayerQuit = "PLAYER_QUIT"
    Chat = "CHAT"
    Command = "COMMAND"
    BlockBreak = "PLAYER_BLOCK_BREAK"
    PlayerMove = "PLAYER_MOVE"
    PlayerJump = "PLAYER_JUMP"
    PlayerTeleport = "PLAYER_TELEPORT"
    PlayerChangeWorld = "PLAYER_CHANGE_WORLD"
    PlayerToggleSprint = "PLAYER_TOGGLE_SPRINT"
    PlayerToggleSneak = "PLAYER_TOGGLE_SNEAK"
    PlayerFoodLoss = "PLAYER_FOOD_LOSS"
    PlayerHeal = "PLAYER_HEAL"
    PlayerHurt = "PLAYER_HURT"
    PlayerDeath = "PLAYER_DEATH"
    PlayerRespawn = "PLAYER_RESPAWN"
    PlayerSkinChange = "PLAYER_SKIN_CHANGE"
    PlayerFireExtinguish = "PLAYER_FIRE_EXTINGUISH"
    PlayerStartBreak = "PLAYER_START_BREAK"
    PlayerBlockPlace = "PLAYER_BLOCK_PLACE"
    PlayerBlockPick = "PLAYER_BLOCK_PICK"
    PlayerItemUse = "PLAYER_ITEM_USE"
    PlayerItemUseOnBlock = "PLAYER_ITEM_USE_ON_BLOCK"
    PlayerItemUseOnEntity = "PLAYER_ITEM_USE_ON_ENTITY"
    PlayerItemRelease = "PLAYER_ITEM_RELEASE"
    PlayerItemConsume = "PLAYER_ITEM_CONSUME"
    PlayerAttackEntity = "PLAYER_ATTACK_ENTITY"
    PlayerExperienceGain = "PLAYER_EXPERIENCE_GAIN"
    PlayerPunchAir = "PLAYER_PUNCH_AIR"
    PlayerSignEdit = "PLAYER_SIGN_EDIT"
    PlayerLecternPageTurn = "PLAYER_LECTERN_PAGE_TURN"
    PlayerItemDamage = "PLAYER_ITEM_DAMAGE"
    PlayerItemPickup = "PLAYER_ITEM_PICKUP"
    PlayerHeldSlotChange = "PLAYER_HELD_SLOT_CHANGE"
    PlayerItemDrop = "PLAYER_ITEM_DROP"
    PlayerTransfer = "PLAYER_TRANSFER"
    PlayerDiagnostics = "PLAYER_DIAGNOSTICS"
    WorldLiquidFlow = "WORLD_LIQUID_FLOW"
    WorldLiquidDecay = "WORLD_LIQUID_DECAY"
    WorldLiquidHarden = "WORLD_LIQUID_HARDEN"
    WorldSound = "WORLD_SOUND"
    WorldFireSpread = "WORLD_FIRE_SPREAD"
    WorldBlockBurn = "WORLD_BLOCK_BURN"
    WorldCropTrample = "WORLD_CROP_TRAMPLE"
    WorldLeavesDecay = "WORLD_LEAVES_DECAY"
    WorldEntitySpawn = "WORLD_ENTITY_SPAWN"
    WorldEntityDespawn = "WORLD_ENTITY_DESPAWN"
    WorldExplosion = "WORLD_EXPLOSION"
    WorldClose = "WORLD_CLOSE"


class PluginInfo(BaseModel):
    """Identity and version record returned by ``Plugin.get_info()``."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique plugin identifier")
    name: str = Field(..., description="Human-readable plugin name")
    version: str = Field(..., description="Plugin version")
    api_version: str = Field(..., description="Host API version the plugin targets")


class Plugin(ABC):
    """Descriptor capability. Implemented by generated code from ``@plugin(...)``."""

    @abstractmethod
    def get_info(self) -> PluginInfo:
        """Return all four descriptor fields together."""
        ...

    @abstractmethod
    def get_id(self) -> str:
        ...

    @abstractmethod
    def get_name(self) -> str:
        ...

    @abstractmethod
    def get_version(self) -> str:
        ...

    @abstractmethod
    def get_api_version(self) -> str:
        ...


class PluginSubscriptions(ABC):
    """Subscription capability. Implemented by generated code from ``@subscriptions(...)``."""

    @abstractmethod
    def get_subscriptions(self) -> list[EventType]:
        """Return the subscribed event kinds in declaration order.

        Returns:
            A new list on every call; duplicates are kept.
        """
        ...
