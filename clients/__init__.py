# clients/ - External API clients
from clients.tmdb import (
    TMDBFetchError,
    MOVIE_CATEGORIES,
    image_url,
    search_movies,
    search_people,
    get_movie_details,
    get_person_details,
    get_trending_movies,
    get_popular_movies,
    get_top_rated_movies,
    get_now_playing_movies,
    get_upcoming_movies,
    get_session,
    warmup_session,
    close_session,
)
