# physquiz/generators.py
"""
Registry of procedural physics question generators.

Each generator is a small pure function of its resolved parameter bounds and
a random source. Registering a new one only needs the formula; drawing,
rounding, option synthesis and formatting are shared.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from errors import UnknownGenerator, ValidationError
from formatting import OPTION_COUNT, format_number, format_question, generate_options, random_in_range
from schemas.generators import Computation, GeneratedQuestion, GeneratorInfo, QuestionType

logger = logging.getLogger("physquiz.generators")

G = 9.81  # m/s^2
SPEED_OF_SOUND = 343.0  # m/s
COULOMB_K = 8.99e9  # N m^2 / C^2
TOTAL_INTERNAL_REFLECTION = "Total internal reflection"

Compute = Callable[[Dict[str, float], random.Random], Computation]


class Domain(BaseModel):
    """Physically meaningful range for one drawn quantity; both its _min and _max must fall inside."""

    model_config = ConfigDict(frozen=True)

    low: Optional[float] = None
    high: Optional[float] = None
    low_open: bool = False
    high_open: bool = False

    def contains(self, v: float) -> bool:
        if self.low is not None and (v <= self.low if self.low_open else v < self.low):
            return False
        if self.high is not None and (v >= self.high if self.high_open else v > self.high):
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.low is not None:
            parts.append(f"{'>' if self.low_open else '>='} {format_number(self.low)}")
        if self.high is not None:
            parts.append(f"{'<' if self.high_open else '<='} {format_number(self.high)}")
        return " and ".join(parts)


POSITIVE = Domain(low=0, low_open=True)
NON_NEGATIVE = Domain(low=0)
ANGLE = Domain(low=0, high=90)
REFRACTIVE_INDEX = Domain(low=1)


class GeneratorSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    description: str
    default_params: Dict[str, float]
    domains: Dict[str, Domain] = Field(default_factory=dict)
    compute: Compute

    def info(self) -> GeneratorInfo:
        return GeneratorInfo(
            key=self.key,
            name=self.name,
            description=self.description,
            default_params=dict(self.default_params),
        )


GENERATORS: Dict[str, GeneratorSpec] = {}


def register(
    key: str,
    name: str,
    description: str,
    domains: Optional[Dict[str, Domain]] = None,
    **default_params: float,
):
    def decorator(fn: Compute) -> Compute:
        if key in GENERATORS:
            raise RuntimeError(f"generator {key!r} registered twice")
        spec = GeneratorSpec(
            key=key,
            name=name,
            description=description,
            default_params={k: float(v) for k, v in default_params.items()},
            domains=domains or {},
            compute=fn,
        )
        for quantity, domain in spec.domains.items():
            for bound in ("min", "max"):
                value = spec.default_params.get(f"{quantity}_{bound}")
                if value is None or not domain.contains(value):
                    raise RuntimeError(f"generator {key!r}: default {quantity}_{bound} outside {domain}")
        GENERATORS[key] = spec
        return fn

    return decorator


def _draw(params: Mapping[str, float], rng: random.Random, quantity: str) -> float:
    return random_in_range(rng, params[f"{quantity}_min"], params[f"{quantity}_max"])


# --- Formulas ---------------------------------------------------------------------


@register(
    "snells-law",
    "Snell's Law",
    "Generate questions about light refraction and Snell's Law",
    domains={"n1": REFRACTIVE_INDEX, "n2": REFRACTIVE_INDEX, "theta1": ANGLE},
    n1_min=1.0,
    n1_max=1.5,
    n2_min=1.3,
    n2_max=2.0,
    theta1_min=15,
    theta1_max=60,
)
def snells_law(params: Dict[str, float], rng: random.Random) -> Computation:
    n1 = _draw(params, rng, "n1")
    n2 = _draw(params, rng, "n2")
    theta1 = _draw(params, rng, "theta1")

    prompt = (
        f"A light ray travels from a medium with refractive index n₁ = {format_number(n1, 2)} "
        f"to another medium with n₂ = {format_number(n2, 2)}. If the angle of incidence is "
        f"{format_number(theta1, 2)}°, what is the angle of refraction (in degrees)?"
    )

    sin_theta2 = n1 * math.sin(math.radians(theta1)) / n2
    if sin_theta2 > 1:
        # Past the critical angle there is no refracted ray.
        critical_deg = math.degrees(math.asin(n2 / n1))
        critical = format_number(critical_deg, 2)
        options = [TOTAL_INTERNAL_REFLECTION]
        for candidate in (critical, format_number(theta1, 2), "90"):
            if candidate not in options:
                options.append(candidate)
        # grazing or near-critical incidence collapses candidates; refill around the critical angle
        while len(options) < OPTION_COUNT:
            for extra in generate_options(critical_deg, rng):
                if extra not in options and len(options) < OPTION_COUNT:
                    options.append(extra)
        rng.shuffle(options)
        return Computation(
            prompt=prompt,
            answer=TOTAL_INTERNAL_REFLECTION,
            options=options,
            false_answer=critical,
        )

    return Computation(prompt=prompt, answer=math.degrees(math.asin(sin_theta2)))


@register(
    "projectile-motion",
    "Projectile Motion",
    "Generate questions about projectile motion and trajectories",
    domains={"velocity": NON_NEGATIVE, "angle": ANGLE, "height": NON_NEGATIVE},
    velocity_min=10,
    velocity_max=30,
    angle_min=20,
    angle_max=70,
    height_min=0,
    height_max=10,
)
def projectile_motion(params: Dict[str, float], rng: random.Random) -> Computation:
    v0 = _draw(params, rng, "velocity")
    theta = _draw(params, rng, "angle")
    h0 = _draw(params, rng, "height")

    v0y = v0 * math.sin(math.radians(theta))
    hmax = h0 + (v0y * v0y) / (2 * G)

    return Computation(
        prompt=(
            f"A projectile is launched from a height of {format_number(h0, 2)} meters with an "
            f"initial velocity of {format_number(v0, 2)} m/s at an angle of "
            f"{format_number(theta, 2)}° above the horizontal. What is the maximum height "
            f"reached by the projectile (in meters)?"
        ),
        answer=hmax,
    )


@register(
    "circular-motion",
    "Circular Motion",
    "Generate questions about circular motion and centripetal acceleration",
    domains={"radius": POSITIVE, "velocity": NON_NEGATIVE},
    radius_min=1,
    radius_max=10,
    velocity_min=5,
    velocity_max=20,
)
def circular_motion(params: Dict[str, float], rng: random.Random) -> Computation:
    radius = _draw(params, rng, "radius")
    velocity = _draw(params, rng, "velocity")
    return Computation(
        prompt=(
            f"An object moves in a circular path with radius {format_number(radius, 2)} meters at "
            f"a constant speed of {format_number(velocity, 2)} m/s. What is the centripetal "
            f"acceleration of the object (in m/s²)?"
        ),
        answer=velocity * velocity / radius,
    )


@register(
    "work-energy",
    "Work and Energy",
    "Generate questions about work, energy, and conservation principles",
    domains={"mass": POSITIVE, "height": NON_NEGATIVE},
    mass_min=1,
    mass_max=10,
    height_min=2,
    height_max=15,
)
def work_energy(params: Dict[str, float], rng: random.Random) -> Computation:
    mass = _draw(params, rng, "mass")
    height = _draw(params, rng, "height")
    return Computation(
        prompt=(
            f"A {format_number(mass, 2)} kg object is lifted to a height of "
            f"{format_number(height, 2)} meters. How much gravitational potential energy does it "
            f"gain (in Joules)?"
        ),
        answer=mass * G * height,
    )


@register(
    "newtons-law",
    "Newton's Second Law",
    "Generate questions about forces, mass, and acceleration",
    domains={"mass": POSITIVE, "force": NON_NEGATIVE, "friction_coef": NON_NEGATIVE},
    mass_min=1,
    mass_max=20,
    force_min=10,
    force_max=100,
    friction_coef_min=0.1,
    friction_coef_max=0.5,
)
def newtons_law(params: Dict[str, float], rng: random.Random) -> Computation:
    mass = _draw(params, rng, "mass")
    applied = _draw(params, rng, "force")
    mu = _draw(params, rng, "friction_coef")

    # a push that cannot overcome friction leaves the block at rest
    net_force = max(0.0, applied - mu * mass * G)
    return Computation(
        prompt=(
            f"A {format_number(mass, 2)} kg block is pushed with a force of "
            f"{format_number(applied, 2)} N across a surface with a coefficient of friction "
            f"μ = {format_number(mu, 2)}. What is the block's acceleration (in m/s²)?"
        ),
        answer=net_force / mass,
    )


@register(
    "simple-harmonic",
    "Simple Harmonic Motion",
    "Generate questions about springs and oscillatory motion",
    domains={"spring_constant": POSITIVE, "mass": POSITIVE, "amplitude": POSITIVE},
    spring_constant_min=100,
    spring_constant_max=500,
    mass_min=0.1,
    mass_max=2.0,
    amplitude_min=0.05,
    amplitude_max=0.2,
)
def simple_harmonic(params: Dict[str, float], rng: random.Random) -> Computation:
    k = _draw(params, rng, "spring_constant")
    m = _draw(params, rng, "mass")
    amplitude = _draw(params, rng, "amplitude")
    return Computation(
        prompt=(
            f"A mass of {format_number(m, 2)} kg is attached to a spring with spring constant "
            f"k = {format_number(k, 2)} N/m and pulled to a displacement of "
            f"{format_number(amplitude)} m. What is the period of oscillation (in seconds)?"
        ),
        answer=2 * math.pi * math.sqrt(m / k),
    )


@register(
    "doppler-effect",
    "Doppler Effect",
    "Generate questions about wave frequency changes due to relative motion",
    domains={
        "source_freq": POSITIVE,
        # at or above the speed of sound the source outruns its own waves
        "source_speed": Domain(low=0, high=SPEED_OF_SOUND, high_open=True),
        "observer_speed": NON_NEGATIVE,
    },
    source_freq_min=200,
    source_freq_max=1000,
    source_speed_min=5,
    source_speed_max=30,
    observer_speed_min=0,
    observer_speed_max=20,
)
def doppler_effect(params: Dict[str, float], rng: random.Random) -> Computation:
    f0 = _draw(params, rng, "source_freq")
    vs = _draw(params, rng, "source_speed")
    vo = _draw(params, rng, "observer_speed")
    return Computation(
        prompt=(
            f"A sound source emitting waves at {format_number(f0, 2)} Hz moves toward an observer "
            f"at {format_number(vs, 2)} m/s while the observer moves toward the source at "
            f"{format_number(vo, 2)} m/s. Taking the speed of sound as 343 m/s, what frequency "
            f"does the observer hear (in Hz)?"
        ),
        answer=f0 * (SPEED_OF_SOUND + vo) / (SPEED_OF_SOUND - vs),
    )


@register(
    "electric-field",
    "Electric Forces",
    "Generate questions about electric forces between charges",
    domains={"distance": POSITIVE},
    charge1_min=1e-6,
    charge1_max=1e-5,
    charge2_min=1e-6,
    charge2_max=1e-5,
    distance_min=0.1,
    distance_max=1.0,
)
def electric_field(params: Dict[str, float], rng: random.Random) -> Computation:
    q1 = _draw(params, rng, "charge1")
    q2 = _draw(params, rng, "charge2")
    r = _draw(params, rng, "distance")
    return Computation(
        prompt=(
            f"Two point charges of {format_number(q1 * 1e6, 2)} μC and "
            f"{format_number(q2 * 1e6, 2)} μC are separated by {format_number(r, 2)} m. What is "
            f"the magnitude of the electric force between them (in N)?"
        ),
        answer=COULOMB_K * abs(q1 * q2) / (r * r),
    )


@register(
    "ideal-gas",
    "Ideal Gas Law",
    "Generate questions about pressure, volume, and temperature relationships in gases",
    domains={"volume": POSITIVE, "pressure": POSITIVE, "temperature": POSITIVE},
    volume_min=0.001,
    volume_max=0.01,
    pressure_min=1e5,
    pressure_max=5e5,
    temperature_min=273,
    temperature_max=373,
)
def ideal_gas(params: Dict[str, float], rng: random.Random) -> Computation:
    v1 = _draw(params, rng, "volume")
    p1 = _draw(params, rng, "pressure")
    t1 = _draw(params, rng, "temperature")
    t2 = _draw(params, rng, "temperature")

    # P1 V1 / T1 = P2 V2 / T2 with P2 == P1
    v2 = v1 * t2 / t1
    return Computation(
        prompt=(
            f"A gas occupies {format_number(v1 * 1000, 2)} L at {format_number(p1 / 1000, 2)} kPa "
            f"and {format_number(t1 - 273, 2)}°C. If the temperature changes to "
            f"{format_number(t2 - 273, 2)}°C at constant pressure, what is the new volume (in L)?"
        ),
        answer=v2 * 1000,
    )


@register(
    "collision",
    "Momentum and Collisions",
    "Generate questions about momentum, collisions, and conservation principles",
    domains={"mass1": POSITIVE, "mass2": POSITIVE, "velocity1": NON_NEGATIVE},
    mass1_min=1,
    mass1_max=10,
    mass2_min=1,
    mass2_max=10,
    velocity1_min=2,
    velocity1_max=15,
)
def collision(params: Dict[str, float], rng: random.Random) -> Computation:
    m1 = _draw(params, rng, "mass1")
    m2 = _draw(params, rng, "mass2")
    v1i = _draw(params, rng, "velocity1")

    # perfectly elastic, second body initially at rest
    v2f = 2 * m1 * v1i / (m1 + m2)
    return Computation(
        prompt=(
            f"A {format_number(m1, 2)} kg object moving at {format_number(v1i, 2)} m/s collides "
            f"elastically with a stationary {format_number(m2, 2)} kg object. What is the final "
            f"velocity of the second object (in m/s)?"
        ),
        answer=v2f,
    )


@register(
    "wave",
    "Wave Properties",
    "Generate questions about wave properties and behavior",
    domains={"frequency": POSITIVE, "wavelength": POSITIVE},
    frequency_min=100,
    frequency_max=1000,
    wavelength_min=0.1,
    wavelength_max=1.0,
)
def wave(params: Dict[str, float], rng: random.Random) -> Computation:
    frequency = _draw(params, rng, "frequency")
    wavelength = _draw(params, rng, "wavelength")
    return Computation(
        prompt=(
            f"A wave has a frequency of {format_number(frequency, 2)} Hz and a wavelength of "
            f"{format_number(wavelength, 2)} m. What is the wave's velocity (in m/s)?"
        ),
        answer=frequency * wavelength,
    )


@register(
    "rotational-motion",
    "Rotational Motion",
    "Generate questions about rotational kinematics and dynamics",
    domains={"radius": POSITIVE, "angular_velocity": NON_NEGATIVE, "mass": POSITIVE},
    radius_min=0.1,
    radius_max=1.0,
    angular_velocity_min=1,
    angular_velocity_max=10,
    mass_min=0.1,
    mass_max=2.0,
)
def rotational_motion(params: Dict[str, float], rng: random.Random) -> Computation:
    radius = _draw(params, rng, "radius")
    omega = _draw(params, rng, "angular_velocity")
    mass = _draw(params, rng, "mass")

    inertia = 0.5 * mass * radius * radius  # solid disk
    return Computation(
        prompt=(
            f"A disk of mass {format_number(mass, 2)} kg and radius {format_number(radius, 2)} m "
            f"rotates with an angular velocity of {format_number(omega, 2)} rad/s. What is its "
            f"angular momentum (in kg⋅m²/s)?"
        ),
        answer=inertia * omega,
    )


# --- Public API -------------------------------------------------------------------


def get_generator(key: str) -> GeneratorSpec:
    spec = GENERATORS.get(key)
    if spec is None:
        raise UnknownGenerator(key)
    return spec


def list_generators() -> List[GeneratorInfo]:
    return [spec.info() for spec in GENERATORS.values()]


def resolve_params(
    spec: GeneratorSpec, params: Optional[Mapping[str, Optional[float]]] = None
) -> Dict[str, float]:
    """Overlay the non-None overrides on the generator's defaults."""
    resolved = dict(spec.default_params)
    for name, value in (params or {}).items():
        if value is None:
            continue
        if name not in resolved:
            raise ValidationError(f"{spec.key}: unknown parameter {name!r}")
        try:
            v = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{spec.key}: parameter {name!r} must be numeric")
        if not math.isfinite(v):
            raise ValidationError(f"{spec.key}: parameter {name!r} must be finite")
        resolved[name] = v

    for name, lo in resolved.items():
        if name.endswith("_min"):
            hi = resolved[name[: -len("_min")] + "_max"]
            if lo > hi:
                raise ValidationError(f"{spec.key}: {name}={lo} is greater than its maximum {hi}")

    for quantity, domain in spec.domains.items():
        for name in (f"{quantity}_min", f"{quantity}_max"):
            if not domain.contains(resolved[name]):
                raise ValidationError(f"{spec.key}: {name}={resolved[name]} must be {domain.describe()}")
    return resolved


def new_seed() -> int:
    return random.SystemRandom().getrandbits(32)


def generate(
    key: str,
    params: Optional[Mapping[str, Optional[float]]] = None,
    question_type: QuestionType = "multiple_choice",
    seed: Optional[int] = None,
) -> GeneratedQuestion:
    spec = get_generator(key)
    resolved = resolve_params(spec, params)
    if seed is None:
        seed = new_seed()

    rng = random.Random(seed)
    try:
        computed = spec.compute(resolved, rng)
    except (ZeroDivisionError, OverflowError, ValueError) as e:
        raise ValidationError(f"{key}: parameters give no answer ({e})") from e
    if isinstance(computed.answer, float) and not math.isfinite(computed.answer):
        raise ValidationError(f"{key}: parameters give a non-finite answer")
    result = format_question(
        computed.prompt,
        computed.answer,
        question_type,
        rng,
        options=computed.options,
        false_answer=computed.false_answer,
    )
    logger.debug("generated %s (%s) seed=%s", key, question_type, seed)
    return result.model_copy(update={"generator": key, "seed": seed})
