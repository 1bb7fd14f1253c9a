"""
资源描述模型
注册表中每个可管理资源的静态描述，以及关系映射的条目定义
"""

from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# 后端返回的一行记录：字段名 -> 任意 JSON 值
AdminRow = Dict[str, Any]


class ResourceDescriptor(BaseModel):
    """
    资源描述
    一个可通过 REST 访问的实体类型，描述其路径、列、可编辑字段、主键和枚举取值

    实例不可变，任何操作期间都可以安全地共享同一个描述对象
    """
    model_config = ConfigDict(frozen=True)

    # 唯一短标识，例如 "jobs"
    key: str

    # REST 集合路径片段
    path: str

    # 展示名称
    label: str

    # 列表视图中的列（有序）
    columns: Tuple[str, ...]

    # 编辑器可创建/更新的字段，缺省时回退到 columns
    allowed_fields: Optional[Tuple[str, ...]] = None

    # 构成记录身份的字段（连接表为复合主键）
    primary_keys: Tuple[str, ...] = ("id",)

    # 字段 -> 合法取值（有序），用于下拉框、选项卡片和状态徽章
    field_enums: Dict[str, Tuple[str, ...]] = Field(default_factory=dict)

    # 提交时需要转换为整数的字段
    numeric_fields: Tuple[str, ...] = ()

    @field_validator("primary_keys")
    @classmethod
    def _primary_keys_not_empty(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("primary_keys 不能为空")
        return value

    @property
    def editable_source(self) -> Tuple[str, ...]:
        """编辑字段的来源：allowed_fields 优先，否则使用 columns"""
        return self.allowed_fields if self.allowed_fields is not None else self.columns

    def enum_values(self, field: str) -> Optional[Tuple[str, ...]]:
        """返回字段声明的枚举取值，未声明时返回 None"""
        return self.field_enums.get(field)


class RelationSpec(BaseModel):
    """
    关系映射条目
    声明一个外键字段指向的目标资源，以及如何把目标记录渲染成可读标签
    """
    model_config = ConfigDict(frozen=True)

    # 目标资源的 REST 路径
    path: str

    # 行 -> 可读标签
    label: Callable[[AdminRow], str]


class ManyToManySpec(BaseModel):
    """
    多对多关系条目
    例如 job <-> skill 通过 job-skills 连接表关联
    """
    model_config = ConfigDict(frozen=True)

    # 所属记录上嵌入的关系数组键名，例如 "skills"
    name: str

    # 连接表资源路径，例如 "job-skills"
    join_path: str

    # 连接表中指向所属记录的字段，例如 "jobId"
    owner_field: str

    # 连接表中指向对端实体的字段，例如 "skillId"
    counterpart_field: str

    # 嵌入数组元素中对端实体对象的键名，例如 "skill"
    nested_key: str

    # 新建连接行时附带的额外字段
    extra_fields: Dict[str, Any] = Field(default_factory=dict)

    @property
    def primary_keys(self) -> Tuple[str, str]:
        """连接表的复合主键"""
        return (self.owner_field, self.counterpart_field)
