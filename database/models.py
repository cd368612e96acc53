from tortoise import fields, Model


TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


# 任务模型
class Tasks(Model):
    id = fields.IntField(pk=True)
    title = fields.CharField(max_length=TITLE_MAX_LENGTH)
    description = fields.CharField(max_length=DESCRIPTION_MAX_LENGTH, default="")
    # 创建时间由服务端写入，之后不再修改
    created_at = fields.DatetimeField()
    is_completed = fields.BooleanField(default=False)

    class Meta:
        table = "tasks"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Task({self.id}, {self.title!r})"
