"""Annotation classifier.

Turns the free-form note text of a One-Page Dungeon into typed notes. An
ordered list of regular expressions with named groups is tried against the
text; the first one that matches decides the variant from the *set of named
groups* the pattern declares. Nothing here raises: text that matches no
pattern, or matches a pattern without gameplay meaning, becomes a plain
``NoteKind.NONE`` note.
"""
from __future__ import annotations
import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..text import a_an, capitalize, decapitalize, join_words, strip_article, to_the
from .model.notes import (
    REAR_NOTE_ID,
    ContainerNote,
    CuriousNote,
    DoorNote,
    ItemNote,
    Note,
    NoteKind,
    SecretNote,
)

__all__ = ["NOTE_PATTERNS", "match_note", "parse_items", "classify", "classify_all"]

_W = r"[A-Za-z\s-]+"
_WC = r"[A-Za-z,\s-]+"

NOTE_PATTERNS: List[re.Pattern] = [re.compile(p) for p in (
    rf"(?P<feature>{_W} depicting a scene of {_W}.)",
    rf"(?P<feature>{_W} depicting (?P<depicted_npc>{_W})(?: with (?P<magic_noun>{_W}) in one hand and a symbol of (?P<symbol>{_W}) in the other).)",
    rf"(?P<feature>{_W} depicting the {_W} around the {_W}(?: as it looked in the distant past)?.)",
    rf"(?P<feature>{_W}, totally destroyed by (?:fire|mold|(?P<enemy>{_W}) vandals).)",
    rf"A mosaic of (?P<symbol>{_W}) pattern on the (?:floor|walls|ceiling)",
    rf"(?P<writing>{_W}) on the (?:wall|floor|ceiling)(?: painted in blood): (?P<sign>{_W})",
    rf"(?P<body>Remains of an? {_W}) apparently killed by (?P<enemy>{_W}), (?P<item>{_WC}) clutched in his hands\.",
    rf"(?P<body>Remains of an? {_W}) apparently killed by (?P<enemy>{_W}), (?P<item>{_WC}) in his hands\.",
    rf"(?P<body>Remains of an? {_W}), (?P<item>{_WC}) clutched in his hands\.",
    rf"(?P<body>Remains of an? {_W}), (?P<item>{_WC}) in his hands\.",
    rf"(?P<rear>A rear entrance into {_W}\.)$",
    rf"(?P<rear>A rear entrance into {_W}\.) (?P<more>{_WC}\.)",
    rf"(?P<feature>A (?:lifelike )?(?:statue|sculpture) of {_WC}), (?P<item>{_WC}) in its hands\.",
    rf"(?P<item>{_WC}) hovering (?P<hovering>{_WC})\.",
    rf"(?P<item>{_WC}) in the middle of a (?P<feature>{_W})\.",
    rf"(?P<npc_desc>{_WC}), (?P<npc_state>locked {_WC})\.",
    rf"(?P<item>{_WC}) locked in a (?P<locked>magical |mechanical | )(?P<container>safe)\.",
    rf"(?P<item>{_WC}) in a (?P<display>(?:shattered |glass |)(?:display|trophy|curio) case)\.",
    rf"(?P<item>{_WC}) in a (?P<locked>magic)ally locked (?P<display>(?:display|trophy|curio) case)\.",
    rf"(?P<item>{_WC}) on a (?P<feature>pedestal(?: table)?)\.",
    rf"(?P<item>{_WC}) on an altar\.",
    rf"A (?P<corpse>{_WC}), (?P<item>{_WC}) (?:nearby|close to it|close by)\.",
    rf"A dying (?P<dying>{_WC}), (?P<item>{_WC}) among his belongings\.",
    rf"(?P<body>A {_WC})(?: (?P<npc_class>{_WC})) with (?P<item>{_WC}) in their hands\.",
    rf"(?P<hidden>A {_WC}) (?:conceals|hides) (?P<item>{_WC})\.",
    rf"(?P<feature>A (?:sign|writing) on the wall(?: painted in blood)?): (?P<writing>{_WC})",
    rf"(?P<feature>{_WC}), (?P<action>{_WC}) (?:when|if) (?P<trigger>{_WC})\.",
    rf"(?P<feature>The {_WC} is filled with (?P<object>{_WC})\.) It (?P<action>{_WC}) when (?P<trigger>{_WC})\.",
    rf"(?P<item>{_WC}) (?:tucked under|among|at the|hidden in) (?P<hidden>{_WC})\.",
    rf"(?P<item>{_W}) under (?P<hidden>{_WC})\.",
    rf"(?P<npc_desc>{_WC}), (?P<doing>{_WC}) (?:in a corner|on the ground)\.",
    rf"(?P<door>{_WC}?) (?:on the|to the) (?P<direction>north|south|east|west)(?:ern)?\b",
    rf"(?P<container>{_WC}) containing (?P<item>{_WC})\.",
    rf"(?P<container>{_WC}) with (?P<item>{_WC}) in it\.",
    rf"(?P<container>{_WC}) holds (?P<item>{_WC})\.",
    rf"(?P<container>{_WC}) with (?P<item>{_WC})\.",
    rf"(?P<item>{_WC}) in (?P<container>{_WC})\.",
    rf"(?P<npc_desc>{_WC})\. (?P<npc_desire>Wants to pay you to get rid of (?P<item>{_WC}))\.",
    rf"(?P<npc_desc>{_WC})\. (?P<npc_desire>{_WC})\.",
    rf"(?P<npc_desc>{_WC}), (?P<npc_state>{_WC})\.",
)]

_KEYHOLES = re.compile(r"\b(?P<keyholes>(?:a|an|one|two|three|four|five|six) keyholes?)\b", re.IGNORECASE)

# Commas inside names like "a mysterious, glowing orb" do not separate items
_ITEM_COMMA = re.compile(r"(?<!mysterious)(?<!strange)(?<!uncanny)(?<!weird),")

_KNOWN_TRIGGERS: Sequence[Tuple[re.Pattern, str]] = (
    (re.compile(r"\bcandles (?:are|get) lit\b"), "Light the candles"),
    (re.compile(r"\bsacrifice is (?:made|offered)\b"), "Make a sacrifice to the {object}"),
    (re.compile(r"\blever is pulled\b"), "Pull the lever"),
    (re.compile(r"\bknob is (?:touched|pressed|turned)\b"), "Touch the knob"),
    (re.compile(r"\bcoin is (?:dropped|thrown|tossed) into it\b"), "Drop a coin into the {object}"),
)

_SUBJECT_WORDS = {"it", "is", "are", "was", "gets", "someone", "somebody", "anyone", "anybody", "one"}

_IRREGULAR_VERBS = {
    "drank": "drink",
    "drunk": "drink",
    "ate": "eat",
    "eaten": "eat",
    "sat": "sit",
    "stood": "stand",
    "spoken": "speak",
    "spoke": "speak",
    "taken": "take",
    "took": "take",
    "broken": "break",
    "broke": "break",
    "thrown": "throw",
    "threw": "throw",
    "seen": "see",
    "held": "hold",
    "lit": "light",
    "shaken": "shake",
    "bitten": "bite",
    "put": "put",
    "read": "read",
    "hit": "hit",
}

_VANISHES = re.compile(
    r"\b(?:turns? into (?:dust|ash(?:es)?|stone|sand)|crumbles?|vanish(?:es)?|disappears?|"
    r"dissolves?|evaporates?|shatters?|explodes?|is destroyed|falls apart|"
    r"burns? (?:up|away|down)|fades? away)\b"
)
_SPAWNS = re.compile(
    r"^(?:spawns|produces|creates|summons|conjures|drops|yields|materializes|reveals)\s+(?P<items>.+)$"
)
_TELEPORTS = re.compile(r"\bteleports?\b")


def match_note(text: str) -> Optional[re.Match]:
    for pattern in NOTE_PATTERNS:
        m = pattern.search(text)
        if m:
            return m
    return None


def parse_items(items: str) -> List[str]:
    """Split an item list: 'A key, a lamp and some rope' -> ['a key', 'a lamp', 'some rope']."""
    out: List[str] = []
    for part in items.split(" and "):
        for item in _ITEM_COMMA.split(part):
            item = item.strip()
            if item:
                out.append(decapitalize(item))
    return out


def _base_form(verb: str) -> str:
    lower = verb.lower()
    if lower in _IRREGULAR_VERBS:
        return _IRREGULAR_VERBS[lower]
    if lower.endswith("ied"):
        return lower[:-3] + "y"
    if lower.endswith("ed"):
        stem = lower[:-2]
        if len(stem) > 2 and stem[-1] == stem[-2] and stem[-1] not in "lsz":
            return stem[:-1]
        if stem.endswith(("v", "c", "z", "us", "as", "os", "ais", "ois", "g")) and not stem.endswith("ng"):
            return stem + "e"
        return stem
    if lower.endswith(("ches", "shes", "sses", "xes")):
        return lower[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return lower[:-1]
    return lower


def _imperative(trigger: str, obj: str) -> str:
    for pattern, template in _KNOWN_TRIGGERS:
        if pattern.search(trigger):
            return template.format(object=obj)
    words = trigger.split()
    while words and words[0].lower() in _SUBJECT_WORDS:
        words.pop(0)
    target = f"the {obj}"
    if not words:
        return f"Use {target}"
    rest = words[1:]
    if "it" in rest:
        rest = [target if w == "it" else w for w in rest]
    else:
        rest.append(target)
    return capitalize(" ".join([_base_form(words[0])] + rest))


def _object_of(feature: str) -> str:
    head = re.split(r" is filled with ", feature)[0]
    head = head.split(" of ")[0]
    return head.strip(" .").split()[-1].lower()


def _curious(note: Dict, groups: Dict[str, Optional[str]]) -> CuriousNote:
    feature = groups["feature"].strip()
    action = groups["action"].strip()
    trigger = groups["trigger"].strip()
    obj = _object_of(feature)
    imperative = _imperative(trigger, obj)
    message = f"When you {decapitalize(imperative)}, it {action}."
    if feature.endswith("."):
        pristine = feature
    else:
        pristine = f"There is {decapitalize(feature)} here."
    items: List[str] = []
    spawned = _SPAWNS.match(action)
    if spawned:
        items.extend(parse_items(spawned.group("items")))
    picked_up = "picked up" in trigger
    if picked_up:
        items.append(decapitalize(feature))
    return CuriousNote(
        id=note["id"],
        text=note["text"],
        ref=note.get("ref", ""),
        pos=note.get("pos", (0, 0)),
        feature=feature,
        object=obj,
        action=action,
        trigger=trigger,
        message=message,
        imperative=imperative,
        pristine=pristine,
        items=tuple(items),
        vanishes=picked_up or bool(_VANISHES.search(action)),
        teleports=bool(_TELEPORTS.search(action)),
    )


def _item_kind(groups: Dict[str, Optional[str]]) -> Optional[NoteKind]:
    keys = set(groups)
    if "body" in keys:
        return NoteKind.REMAINS if groups["body"].startswith("Remains") else NoteKind.BODY
    if "corpse" in keys:
        return NoteKind.CORPSE
    if "dying" in keys:
        return NoteKind.DYING
    if "hovering" in keys:
        return NoteKind.HOVERING
    if keys == {"item", "feature"} or keys == {"item", "display"}:
        return NoteKind.FEATURE
    if keys == {"item"}:
        return NoteKind.ITEM
    return None


def _item_note(note: Dict, kind: NoteKind, groups: Dict[str, Optional[str]]) -> ItemNote:
    items = parse_items(groups["item"])
    text = note["text"]
    listed = join_words(items)
    if kind is NoteKind.HOVERING:
        holder = groups["hovering"].strip()
        message = f"You approach {to_the(listed)} hovering {holder} and take it."
    elif kind is NoteKind.REMAINS:
        holder = decapitalize(groups["body"].strip())
        message = f"You search the {strip_article(holder.replace('remains of ', '', 1))}'s remains and find {listed}."
    elif kind is NoteKind.BODY:
        holder = decapitalize(groups["body"].strip())
        message = f"You take {listed} from {to_the(holder)}."
    elif kind is NoteKind.CORPSE:
        holder = a_an(groups["corpse"].strip())
        message = f"You search near {to_the(holder)} and find {listed}."
    elif kind is NoteKind.DYING:
        holder = f"a dying {groups['dying'].strip()}"
        message = f"You search the belongings of {to_the(holder)} and find {listed}."
    elif kind is NoteKind.FEATURE:
        holder = (groups.get("feature") or groups.get("display") or "").strip()
        message = f"You take {listed} from the {holder}."
    else:
        holder = ""
        message = f"You pick up {listed}."
    return ItemNote(
        id=note["id"],
        text=text,
        ref=note.get("ref", ""),
        pos=note.get("pos", (0, 0)),
        kind=kind,
        holder=holder,
        items=tuple(items),
        message=message,
        pristine=text,
        empty="",
    )


def classify(note: Dict) -> Tuple[Note, ...]:
    """Classify one raw note ``{id, text, ref?, pos?}``.

    Returns one note, or two when a rear entrance sentence is followed by a
    further clause (the rear half carries ``REAR_NOTE_ID``).
    """
    text = note["text"]
    common = dict(id=note["id"], text=text, ref=note.get("ref", ""), pos=note.get("pos", (0, 0)))
    m = match_note(text)
    if m is None:
        return (Note(**common),)
    groups = m.groupdict()
    keys = set(groups)
    matched = {k: v for k, v in groups.items() if v is not None}

    if keys == {"container", "item"}:
        container = decapitalize(groups["container"].strip())
        items = parse_items(groups["item"])
        noun = strip_article(container)
        listed = join_words(items)
        return (ContainerNote(
            **common,
            container=container,
            items=tuple(items),
            message=f"You open {to_the(container)} and find {listed}.",
            imperative=f"Open the {noun}.",
            pristine=f"There is {a_an(noun)} here.",
            empty=f"The {noun} lies open and empty here.",
        ),)

    if keys == {"hidden", "item"}:
        items = parse_items(groups["item"])
        listed = join_words(items)
        return (SecretNote(
            **common,
            hidden=decapitalize(groups["hidden"].strip()),
            items=tuple(items),
            message=f"You find {listed}.",
        ),)

    if groups.get("more"):
        rear = Note(id=REAR_NOTE_ID, text=groups["rear"], ref=common["ref"], pos=common["pos"],
                    groups={"rear": groups["rear"]})
        rest = classify(dict(note, text=groups["more"]))
        return (rear,) + rest

    if keys == {"rear"}:
        return (Note(**common, groups=matched),)

    if keys == {"door", "direction"}:
        door = groups["door"].strip()
        holes = _KEYHOLES.search(door)
        return (DoorNote(
            **common,
            door=door,
            direction=groups["direction"],
            keyholes=holes.group("keyholes").lower() if holes else None,
        ),)

    if "action" in keys and "trigger" in keys:
        return (_curious(note, groups),)

    if "item" in keys and groups["item"]:
        kind = _item_kind(groups)
        if kind is not None:
            return (_item_note(note, kind, groups),)

    logging.debug(f"Note {note['id']} kept as plain text: {text!r}")
    return (Note(**common, groups=matched),)


def classify_all(notes: Sequence[Dict]) -> List[Note]:
    out: List[Note] = []
    for note in notes:
        out.extend(classify(note))
    return out
