"""Human-readable brand names from domain stems.

``jungleluxe`` → "Jungle Luxe", ``the-brand-co`` → "The Brand Co",
``airbnb`` → "Airbnb" (no clean split, so the stem is title-cased).
"""

from __future__ import annotations

import re
from typing import List

from .url import domain_stem

WORDS = frozenset(
    """
    ai an at be by do go hi if in is it me my no of on or so to up us we
    ace act add age aid aim air all and any app arc art ask bay bee big bit box bud bug
    bus buy cab can cap car cat cow cup cut day den dew dig dot dry eco elm end era eve
    eye fab fan far fig fin fit fix fly fog for fox fun gap gas gem get hat hen hop hot
    how hub hue ice ink inn ion ivy jam jar jet job joy key kid kin kit lab law lay leg
    let lid lit log lot low mad map max mix mom mud net new not now nut oak odd off oil
    old one orb our out owl own pad pal pan pat paw pay pea pen pet pie pig pin pit pod
    pop pot pro pub pup put raw ray red rib rig rim rob rod row rub rug run rye sea see
    set sew sky sly son spa spy sun tab tag tan tap tar tax tea ten the tie tin tip toe
    top toy try tub two use van vet via vow war wax way web wet who why win wit yes yet
    zen zip
    able acre also arch area aura auto back bake band bank barn base bath beam bean bear
    bell best bike bird blue boat body bold bolt bond book boom boss bowl brew buzz cafe
    cake calm camp cape card care cart case cash cave chat chef city clay club coal coat
    code coin cold cook cool copy core corn corp crew cube cure dale dark dash data dawn
    deal deck deep desk dial dock door dove down draw drop dune dusk dust east easy edge
    epic face fact fair fall farm fast fern file film find fine fire firm fish five flag
    flat flex flip flow foam folk font food foot ford fork form fort four free frog fuel
    fund gain game gate gear gift gold golf good gray grey grid grow gulf hall hand harp
    hash haus head heal heat help herb here hero high hill hive hold home hood hook hope
    horn host hour icon idea inch info iron isle jade jazz join jump just keen keep king
    kite knot lace lake lamb lamp land lane lark last lawn lead leaf lean leap lens life
    lift lily lime line link lion list live load loft logo long look loop lore love luck
    lush luxe made mail main make mark mart mate maze meal mesa mile milk mill mind mine
    mint mist mode moon moss most move myth name navy near neat nest next nice node nook
    nova oaks once only open opal over pace pack page palm park part pass path peak pear
    pier pine pink pipe plan play plot plum plus pond pony pool port post pure quest race
    rail rain rank rate read real reef rent rest rich ride ring rise road rock roof room
    root rose ruby rush safe saga sage sail salt sand save seal seed self sell shop show
    side sign silk site size skin slate snap snow soft soil solo song soul span spot star
    stay stem step stone suit sure surf swan sync tail take tale talk tank task team tech
    tell tent term test text tide tile time tiny tone tool tour town tree trek trim trip
    true tune turn twin type unit user vale vast verb view vine volt wave well west wild
    wind wine wing wire wise wish wolf wood wool word work yard yarn year yoga zone zoom
    about agent alpha amber angel apple arena atlas audio azure badge basic beach berry
    black blade blend bliss block bloom board boost brain brand brave bread brick bright
    brook brown build cabin cedar chain chair charm chart check chief civic claim class
    clean clear click cliff climb clock cloud coach coast coral count court cover craft
    crane cream creek crest cross crown curve cycle daily dance delta depth digit dream
    drive eagle earth elite ember entry equal event every faith field final first flame
    fleet flock flora focus force forge forte forth frame fresh front frost fruit giant
    glass globe glory grace grade grand grant grape green group guard guide happy harbor
    haven heart honey horse hotel house human ideal image inner input ivory jewel juice
    labor laser layer learn legal lemon level light limit local logic loyal lucky lunar
    magic maker maple march marine media mercy merit metal metro might model money month
    motor mount music noble north novel ocean olive omega orbit order other outer owner
    panel paper party peace pearl penny phase phone photo piano pilot pixel place plain
    plane plant plaza point power press price pride prime print prism proof proud pulse
    quick quiet radar radio raven ready realm ridge right river robin rocky rouge round
    royal rural salon scale scene scope scout sense seven shade shape share sharp shell
    shift shine shore sight sigma skill slate smart smile solar solid sound south space
    spark spice spire split sport spring squad stack staff stage stand state steam steel
    stock stone store storm story strong studio style sugar suite sunny super sweet swift
    table taste terra thing think three tiger title toast today token total touch tower
    track trade trail train trend tribe trust truth ultra union unity urban valid value
    valley vault venture verde vista vital vivid voice water whale wheat wheel white
    whole world worth young youth
    action advice agency anchor armour arrow artist autumn avenue beacon beauty better
    bridge bright bronze budget bureau butter canvas capital carbon castle center centre
    change charge circle client clinic closet coffee colony common copper corner cosmic
    cotton county create credit crystal custom design detail direct doctor domain dragon
    driven eleven energy engine escape estate ethos expert fabric falcon family farmer
    fellow figure finder flight flower forest format fossil friend future galaxy garden
    gather global golden growth harbor health height hidden honest hudson impact import
    indigo insight island jungle kettle kindle labs ladder legacy legend letter lights
    little living lumber luxury manor market marble master meadow method middle mirror
    mobile modern moment motion native nature nimble number office online orange origin
    output oxford palace parent people pepper planet pocket portal prairie public purple
    quarry rabbit radius rapid record remote report rescue result retail ribbon rocket
    safety salmon sample school screen season secure select signal silver simple single
    smooth social source sphere spirit square stable status stream street strike studio
    summit sunset supply system talent target temple thread ticket timber travel trophy
    turtle united upward useful valley velvet vendor vision wealth window winter wonder
    yellow
    """.split()
)


def title_case(text: str) -> str:
    return text[:1].upper() + text[1:].lower() if text else text


def split_words(stem: str) -> List[str] | None:
    """Split a lower-case stem into dictionary words, preferring fewer words.

    Returns ``None`` when no split covers the whole stem.
    """

    n = len(stem)
    best: List[List[str] | None] = [None] * (n + 1)
    best[0] = []
    for start in range(n):
        prefix = best[start]
        if prefix is None:
            continue
        for end in range(start + 2, n + 1):
            word = stem[start:end]
            if word in WORDS:
                candidate = prefix + [word]
                current = best[end]
                if current is None or len(candidate) < len(current):
                    best[end] = candidate
    return best[n]


def name_from_stem(stem: str) -> str | None:
    cleaned = re.sub(r"\d+$", "", stem or "")
    if len(cleaned) < 2:
        return None

    if "-" in cleaned:
        parts = [title_case(p) for p in cleaned.split("-") if p]
        if parts:
            return " ".join(parts)

    camel = re.split(r"(?<=[a-z])(?=[A-Z])", cleaned)
    if len(camel) >= 2:
        return " ".join(title_case(p) for p in camel)

    lower = cleaned.lower()
    if lower in WORDS:
        return title_case(cleaned)
    words = split_words(lower)
    if words and 2 <= len(words) <= 4:
        return " ".join(title_case(w) for w in words)
    return title_case(cleaned)


def name_from_domain(url: str) -> str | None:
    """Brand name guessed from the domain of *url*, or ``None`` if too short."""
    return name_from_stem(domain_stem(url))
