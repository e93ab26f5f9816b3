"""Pydantic models for the current-weather payload returned by the provider."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    lon: float = 0.0
    lat: float = 0.0


class MainReadings(BaseModel):
    """Temperature block; values are Celsius because requests use ``units=metric``."""

    temp: float
    feels_like: float = 0.0
    temp_min: float = 0.0
    temp_max: float = 0.0
    pressure: int = 0
    humidity: int = 0


class Condition(BaseModel):
    id: int = 0
    main: str = ""
    description: str = ""
    icon: str = ""


class Wind(BaseModel):
    speed: float = 0.0
    deg: int = 0


class Clouds(BaseModel):
    all: int = 0


class SystemInfo(BaseModel):
    country: str = ""
    sunrise: int = 0
    sunset: int = 0


class WeatherReading(BaseModel):
    """A single current-weather observation for one city."""

    name: str
    coord: Coordinates = Field(default_factory=Coordinates)
    main: MainReadings
    weather: List[Condition] = Field(default_factory=list)
    wind: Wind = Field(default_factory=Wind)
    clouds: Clouds = Field(default_factory=Clouds)
    sys: SystemInfo = Field(default_factory=SystemInfo)
    dt: int = 0
