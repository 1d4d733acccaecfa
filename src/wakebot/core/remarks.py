"""Texts shown to the requester while the machine wakes up."""

from __future__ import annotations

import secrets

ACKNOWLEDGED = (
    "✨ *squeak squeak* Oh! Time to work my magic! 🪄✨ Let me wake up that sleepy server for you... "
    "This might take a moment, but I'm on it! 🐭"
)
ALREADY_WAKING = "🐭 *squeak!* I'm already waking that server up! Hang tight, I'll shout when it's ready. ✨"
NOT_ALLOWED = "🐭 *tiny frown* Sorry, I can't wake servers from this channel."
CHECKING_HEALTH = (
    f"{ACKNOWLEDGED}\n\n🔮 *twitching whiskers* The server is stirring! "
    "Let me peek into my crystal ball and check if it's feeling healthy... ✨"
)
READY = (
    "🎉 *happy squeaks* ✨ Ta-da! My magic worked perfectly! The server is all awake and ready to play! 🐭🎮"
    "\n\n*does a little mouse dance* 🕺✨"
)
START_FAILED = (
    "😿 *squeak* Oh no! My magic spell didn't work quite right... The server didn't want to wake up! {error}"
    "\n\nMaybe try again? I'll do my best! 🐭✨"
)
GAVE_UP = (
    "😿 *droopy whiskers* I've been waiting for {minutes} minutes and the server still isn't healthy. "
    "I'm going to stop checking now, maybe ask a grown-up wizard to take a look? 🐭"
)

PATIENCE_REMARKS = (
    "🐭 *adjusts tiny wizard hat* Hmm, this server is being quite sleepy today! "
    "But don't worry, I'm a patient mouse! ✨",
    "🔮 *peers into crystal ball again* Still checking... "
    "This server must be having some really good dreams! 😴✨",
    "*squeak* Still working on it! My magic is strong, but some servers need extra time to wake up properly! 🪄🐭",
    "✨ *twitches whiskers thoughtfully* Hmm, this is taking longer than usual! "
    "But I won't give up - I'm a determined little mouse! 🐭💪",
    "🔮 *checks crystal ball for the 6th time* Still not quite ready yet... "
    "But I can feel it getting closer! My whiskers are tingling! ✨🐭",
)


def patience_remark() -> str:
    # secrets keeps concurrent sessions from picking in lockstep.
    return secrets.choice(PATIENCE_REMARKS)


def start_failed(error: Exception | str) -> str:
    return START_FAILED.format(error=error)


def gave_up(seconds: float) -> str:
    return GAVE_UP.format(minutes=max(1, round(seconds / 60)))


def with_mention(text: str, mention: str | None) -> str:
    if not mention:
        return text
    return f"{mention} {text}"
