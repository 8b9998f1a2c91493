# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Defines the Pydantic data models for the application."""

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class StudentRecord(BaseModel):
    """A single student row scraped from the registry search page.

    Attribute names describe the data; the JSON keys keep the names the
    public API has always used (``nim``, ``university``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    identifier: str = Field(default="", alias="nim")
    institution: str = Field(default="", alias="university")
    program: str = ""


class InstitutionDetail(BaseModel):
    """Institution metadata as returned by the registry's detail API.

    Values are taken verbatim from the payload. Missing or null fields fall
    back to an empty string (or 0.0 for the coordinates).
    """

    model_config = ConfigDict(extra="ignore")

    kelompok: str = ""
    pembina: str = ""
    id_sp: str = ""
    kode_pt: str = ""
    email: str = ""
    no_tel: str = ""
    no_fax: str = ""
    website: str = ""
    alamat: str = ""
    nama_pt: str = ""
    nm_singkat: str = ""
    kode_pos: str = ""
    provinsi_pt: str = ""
    kab_kota_pt: str = ""
    kecamatan_pt: str = ""
    lintang_pt: float = 0.0
    bujur_pt: float = 0.0
    tgl_berdiri_pt: str = ""
    tgl_sk_pendirian_sp: str = ""
    sk_pendirian_sp: str = ""
    status_pt: str = ""
    akreditasi_pt: str = ""
    status_akreditasi: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, value, info: ValidationInfo):
        if value is None:
            return 0.0 if info.field_name in ("lintang_pt", "bujur_pt") else ""
        return value


class ResolutionResult(BaseModel):
    """The response body for one student lookup."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    records: list[StudentRecord] = Field(default_factory=list, alias="data")
    details: list[InstitutionDetail] = Field(
        default_factory=list, alias="detail_kampus",
    )

    def to_json_dict(self) -> dict:
        """Dump the result using the public JSON keys."""
        return self.model_dump(mode="json", by_alias=True)
