"""
CallBoard Backend — Static Catalog Data
=========================================

What:  Fixed lists served by the API without touching the database:
       category values, their Russian display names, promotional banners and
       the team roster.
"""

from typing import List

from app.models.call import Category
from app.schemas.call import Ad
from app.schemas.user import Creator

# Display order used by the front end's category bar
CATEGORIES: List[str] = [category.value for category in Category]

RUSSIAN_CATEGORIES: List[str] = [
    "Недвижимость",
    "Транспорт",
    "Работа",
    "Электроника",
    "Бизнес и услуги",
    "Отдых и спорт",
    "Отдам бесплатно",
    "Обмен",
]

ADS: List[Ad] = [
    Ad(
        title="Электроника",
        image_url="https://i.ibb.co/NNm2b1F/electronics-banner.jpg",
        link="/call/specific/electronics",
    ),
    Ad(
        title="Недвижимость",
        image_url="https://i.ibb.co/4ZPrmfj/property-banner.jpg",
        link="/call/specific/property",
    ),
    Ad(
        title="Отдых и спорт",
        image_url="https://i.ibb.co/7jY0GQn/sport-banner.jpg",
        link="/call/specific/recreationAndSport",
    ),
]

_AVATAR_BUCKET = "https://storage.googleapis.com/kidslikev2_bucket"

CREATORS: List[Creator] = [
    Creator(
        first_name="Daniel",
        second_name="Tsvirkun",
        tasks="Team Lead | Header",
        avatar=f"{_AVATAR_BUCKET}/cb3029e9-8667-480a-8646-4eadaa9bdeb6.jpg",
    ),
    Creator(
        first_name="Andrew",
        second_name="Oscolok",
        tasks="Forma rejestracji, nasz zespół i ustawienia userbacka",
        avatar=f"{_AVATAR_BUCKET}/4d4e8cc1-db9e-4713-b8e7-f559693969e4.jpg",
    ),
    Creator(
        first_name="Iryna",
        second_name="Lunova",
        tasks="Karta ogłoszenia i wypełnienie bazy",
        avatar=f"{_AVATAR_BUCKET}/5ce409e6-def8-4151-9e1f-3fafcec56410.jpg",
    ),
    Creator(
        first_name="Andrii",
        second_name="Kochmaruk",
        tasks="Mój profil",
        avatar=f"{_AVATAR_BUCKET}/2538fc90-8959-4a56-8865-9dde68b8c537.jpg",
    ),
    Creator(
        first_name="Igor",
        second_name="Serov",
        tasks="Napisanie modułów pytań do ogłoszeń",
        avatar=f"{_AVATAR_BUCKET}/d4996f0a-274f-459d-ab3a-fe0306fb4b50.jpg",
    ),
    Creator(
        first_name="Oleksandr",
        second_name="Tril",
        tasks="Architektura BD",
        avatar=f"{_AVATAR_BUCKET}/9d2f4b2a-e803-4fc4-ba6e-b10f0ce55d14.png",
    ),
    Creator(
        first_name="Andrii",
        second_name="Kyluk",
        tasks="Reklama i pasek kategorii",
        avatar=f"{_AVATAR_BUCKET}/2c94ba5c-6c13-4aa0-8e05-86eba65daa47.jpg",
    ),
    Creator(
        first_name="Yurii",
        second_name="Dubenyuk",
        tasks="Stopka i okno modalne",
        avatar=f"{_AVATAR_BUCKET}/1dd94074-cb6e-49c6-9a33-4c4345e6756c.jpg",
    ),
    Creator(
        first_name="Ivan",
        second_name="Shtypula",
        tasks="Forma tworzenia ogłoszeń",
        avatar=f"{_AVATAR_BUCKET}/c6705931-a616-4695-9fdf-17c6e9f6b936.jpg",
    ),
]
