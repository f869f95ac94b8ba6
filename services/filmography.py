# services/filmography.py - Group a person's credits into labeled sections
import logging
from typing import Dict, Iterable, List, Optional

from models import Credit, CreditKind, FilmographySection, PersonFull

logger = logging.getLogger(__name__)

# Department a person is known for -> the crew job that leads their filmography
PRIMARY_JOB_BY_DEPARTMENT = {
    "Directing": "Director",
    "Writing": "Writer",
    "Production": "Producer",
}

ACTING_DEPARTMENT = "Acting"
ACTOR_LABEL = "As Actor"


def _dedupe_by_movie(credits: Iterable[Credit]) -> List[Credit]:
    """Keep the first credit for each movie id, in source order."""
    seen = set()
    unique = []
    for credit in credits:
        if credit.movie_id in seen:
            continue
        seen.add(credit.movie_id)
        unique.append(credit)
    return unique


def sort_by_release_date(credits: List[Credit]) -> List[Credit]:
    """Newest first; undated credits go last. Stable for equal dates."""
    dated = [c for c in credits if c.release_date]
    undated = [c for c in credits if not c.release_date]
    # reverse=True keeps equal keys in their original relative order
    dated.sort(key=lambda c: c.release_date, reverse=True)
    return dated + undated


def build_filmography(
    crew: Iterable[Credit],
    cast: Iterable[Credit],
    known_for_department: Optional[str] = None,
) -> List[FilmographySection]:
    """Build the ordered filmography sections for one person.

    Crew credits are grouped per job ("As Director", "As Editor", ...), the
    job matching the person's department leads, remaining jobs follow by
    size, and acting credits go first for actors and last for everyone else.
    """
    crew_by_job: Dict[str, List[Credit]] = {}
    for credit in crew:
        crew_by_job.setdefault(credit.job, []).append(credit)

    for job, credits in crew_by_job.items():
        crew_by_job[job] = sort_by_release_date(_dedupe_by_movie(credits))

    unique_cast = sort_by_release_date(_dedupe_by_movie(cast))

    department = known_for_department or ""
    sections: List[FilmographySection] = []

    primary_job = PRIMARY_JOB_BY_DEPARTMENT.get(department)
    if primary_job and crew_by_job.get(primary_job):
        sections.append(FilmographySection(f"As {primary_job}", CreditKind.CREW, crew_by_job.pop(primary_job)))

    # sorted() is stable, so equally sized groups keep their encounter order
    remaining = sorted(crew_by_job.items(), key=lambda item: len(item[1]), reverse=True)
    for job, credits in remaining:
        if credits:
            sections.append(FilmographySection(f"As {job}", CreditKind.CREW, credits))

    if unique_cast:
        acting = FilmographySection(ACTOR_LABEL, CreditKind.CAST, unique_cast)
        if department == ACTING_DEPARTMENT:
            sections.insert(0, acting)
        else:
            sections.append(acting)

    return sections


def filmography_for(person: PersonFull) -> List[FilmographySection]:
    sections = build_filmography(person.crew_credits, person.cast_credits, person.known_for_department)
    logger.debug(
        f"Built {len(sections)} filmography section(s) for person {person.id} "
        f"({len(person.crew_credits)} crew, {len(person.cast_credits)} cast credits)"
    )
    return sections
