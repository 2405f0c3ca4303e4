from typing import Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Cell(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    cell_type: str = Field(
        default="",
        validation_alias=AliasChoices("cell_type", "cellType"),
        description="markdown, code, or anything else (skipped on conversion).")
    source: Optional[Union[str, Tuple[str, ...]]] = Field(
        default="",
        description="Cell text, either a single string or line fragments to be concatenated.")


class NotebookDocument(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    cells: Tuple[Cell, ...] = Field(default_factory=tuple)

    @property
    def code_cell_count(self) -> int:
        return sum(1 for cell in self.cells if cell.cell_type == "code")


class ConversionOptions(BaseModel):
    """
    Per-call switches for notebook_to_script. Unset flags are false.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    magics: bool = Field(
        default=False,
        description="Comment out %, %% and ! lines in code cells.")
    in_tags: bool = Field(
        default=False,
        alias="inTags",
        description="Emit '# In[n]:' before every code cell.")
    header: bool = Field(
        default=False,
        description="Prepend shebang, coding, source and timestamp lines.")
